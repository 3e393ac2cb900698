"""
Tests for the status subscriber fan-out.
"""

import asyncio

from foodles.services.restaurants import Broadcaster


class FakeSubscriber:
    def __init__(self, is_open=True, fail=False):
        self.is_open = is_open
        self.fail = fail
        self.messages = []

    async def send_json(self, message):
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.messages.append(message)


class TestBroadcaster:

    def test_connect_sends_snapshot_first(self):
        broadcaster = Broadcaster()
        subscriber = FakeSubscriber()

        asyncio.run(broadcaster.connect(subscriber, {"type": "initial_status"}))

        assert subscriber.messages == [{"type": "initial_status"}]
        assert len(broadcaster) == 1

    def test_broadcast_reaches_every_open_subscriber(self):
        broadcaster = Broadcaster()
        a, b = FakeSubscriber(), FakeSubscriber()

        async def scenario():
            await broadcaster.connect(a, {})
            await broadcaster.connect(b, {})
            return await broadcaster.broadcast({"type": "status_change"})

        assert asyncio.run(scenario()) == 2
        assert a.messages[-1] == b.messages[-1] == {"type": "status_change"}

    def test_closed_subscribers_are_skipped_not_removed(self):
        broadcaster = Broadcaster()
        live, closed = FakeSubscriber(), FakeSubscriber()

        async def scenario():
            await broadcaster.connect(live, {})
            await broadcaster.connect(closed, {})
            closed.is_open = False
            return await broadcaster.broadcast({"n": 1})

        assert asyncio.run(scenario()) == 1
        assert closed.messages == [{}]
        assert len(broadcaster) == 2

    def test_send_error_does_not_abort_broadcast(self):
        broadcaster = Broadcaster()
        flaky, healthy = FakeSubscriber(), FakeSubscriber()

        async def scenario():
            await broadcaster.connect(flaky, {})
            await broadcaster.connect(healthy, {})
            flaky.fail = True
            return await broadcaster.broadcast({"n": 1})

        assert asyncio.run(scenario()) == 1
        assert healthy.messages[-1] == {"n": 1}

    def test_disconnect_during_broadcast_is_tolerated(self):
        broadcaster = Broadcaster()

        class Leaver(FakeSubscriber):
            async def send_json(self, message):
                broadcaster.disconnect(self)
                await super().send_json(message)

        leaver, other = Leaver(), FakeSubscriber()

        async def scenario():
            await broadcaster.connect(leaver, {})
            await broadcaster.connect(other, {})
            return await broadcaster.broadcast({"n": 1})

        assert asyncio.run(scenario()) == 2
        assert len(broadcaster) == 1

    def test_disconnect_unknown_subscriber_is_noop(self):
        broadcaster = Broadcaster()

        broadcaster.disconnect(FakeSubscriber())

        assert len(broadcaster) == 0
