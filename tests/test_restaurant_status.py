"""
Tests for restaurant flags, the status cache and the change monitor.
"""

import asyncio

from foodles.services.restaurants import (
    CLOSED_MESSAGE,
    OPEN_MESSAGE,
    EnvironmentFlagSource,
)


class RecordingSubscriber:
    def __init__(self):
        self.is_open = True
        self.messages = []

    async def send_json(self, message):
        self.messages.append(message)


class SlowSubscriber(RecordingSubscriber):
    """Blocks its first send until released."""

    def __init__(self):
        super().__init__()
        self.sending = asyncio.Event()
        self.release = asyncio.Event()

    async def send_json(self, message):
        if not self.messages:
            self.sending.set()
            await self.release.wait()
        self.messages.append(message)


class TestEnvironmentFlagSource:

    def test_only_true_means_open(self):
        source = EnvironmentFlagSource({
            "RESTAURANT_1_OPEN": "true",
            "RESTAURANT_2_OPEN": "TRUE",
            "RESTAURANT_3_OPEN": "false",
            "RESTAURANT_4_OPEN": "yes",
        })

        assert source.is_open("1")
        assert source.is_open("2")
        assert not source.is_open("3")
        assert not source.is_open("4")
        assert not source.is_open("5")

    def test_reads_live_values(self):
        environ = {"RESTAURANT_1_OPEN": "false"}
        source = EnvironmentFlagSource(environ)
        assert not source.is_open("1")

        environ["RESTAURANT_1_OPEN"] = "true"

        assert source.is_open("1")


class TestRestaurantStatusCache:

    def test_messages_follow_flags(self, status_cache):
        batch = asyncio.run(status_cache.get_all_statuses(["1", "2"]))

        assert batch.statuses["1"].is_open
        assert batch.statuses["1"].message == OPEN_MESSAGE
        assert not batch.statuses["2"].is_open
        assert batch.statuses["2"].message == CLOSED_MESSAGE

    def test_reads_within_window_are_served_from_cache(self, status_cache, flag_source, clock):
        first = asyncio.run(status_cache.get_all_statuses(["1", "2"]))
        flag_source.set("1", False)
        clock.advance(5)
        second = asyncio.run(status_cache.get_all_statuses(["1", "2"]))

        assert first.is_from_cache is False
        assert second.is_from_cache is True
        assert second.statuses["1"] is first.statuses["1"]
        assert second.statuses["2"] is first.statuses["2"]
        assert second.statuses["1"].is_open

    def test_read_after_window_resamples(self, status_cache, flag_source, clock):
        first = asyncio.run(status_cache.get_all_statuses(["1"]))
        flag_source.set("1", False)
        clock.advance(10.5)
        second = asyncio.run(status_cache.get_all_statuses(["1"]))

        assert second.is_from_cache is False
        assert not second.statuses["1"].is_open
        assert second.last_updated > first.last_updated

    def test_next_update_is_one_window_after_last_update(self, status_cache):
        batch = asyncio.run(status_cache.get_all_statuses(["1"]))

        assert (batch.next_update - batch.last_updated).total_seconds() == 10.0

    def test_unseen_id_forces_resample(self, status_cache):
        asyncio.run(status_cache.get_all_statuses(["1"]))
        batch = asyncio.run(status_cache.get_all_statuses(["1", "3"]))

        assert batch.is_from_cache is False
        assert set(batch.statuses) == {"1", "3"}

    def test_single_status(self, status_cache):
        status = asyncio.run(status_cache.get_status("2"))

        assert status.is_open is False
        assert status.message == CLOSED_MESSAGE


class TestRestaurantStatusMonitor:

    def test_no_flip_no_event(self, status_monitor, broadcaster):
        subscriber = RecordingSubscriber()

        async def scenario():
            await status_monitor.subscribe(subscriber)
            return [await status_monitor.tick(), await status_monitor.tick()]

        ticks = asyncio.run(scenario())

        assert ticks == [[], []]
        assert [m["type"] for m in subscriber.messages] == ["initial_status"]

    def test_flip_is_broadcast_once(self, status_monitor, flag_source):
        subscriber = RecordingSubscriber()

        async def scenario():
            await status_monitor.subscribe(subscriber)
            flag_source.set("2", True)
            changes = await status_monitor.tick()
            again = await status_monitor.tick()
            return changes, again

        changes, again = asyncio.run(scenario())

        assert len(changes) == 1
        assert changes[0].restaurant_id == "2"
        assert changes[0].previous_status is False
        assert changes[0].is_open is True
        assert again == []

        message = subscriber.messages[-1]
        assert message["type"] == "status_change"
        assert message["changes"][0]["restaurantId"] == "2"
        assert message["changes"][0]["previousStatus"] is False
        assert message["changes"][0]["isOpen"] is True

    def test_several_flips_in_one_tick_share_a_message(self, status_monitor, flag_source):
        subscriber = RecordingSubscriber()

        async def scenario():
            await status_monitor.subscribe(subscriber)
            flag_source.set("1", False)
            flag_source.set("3", False)
            await status_monitor.tick()

        asyncio.run(scenario())

        assert len(subscriber.messages) == 2
        changed = {c["restaurantId"] for c in subscriber.messages[1]["changes"]}
        assert changed == {"1", "3"}

    def test_snapshot_message_on_subscribe(self, status_monitor):
        subscriber = RecordingSubscriber()

        asyncio.run(status_monitor.subscribe(subscriber))

        message = subscriber.messages[0]
        assert message["type"] == "initial_status"
        assert message["statuses"] == {"1": True, "2": False, "3": True}
        assert "timestamp" in message

    def test_background_loop_picks_up_flips(self, status_monitor, flag_source):
        subscriber = RecordingSubscriber()
        status_monitor.interval_seconds = 0.01

        async def scenario():
            await status_monitor.subscribe(subscriber)
            status_monitor.start()
            assert status_monitor.is_running
            flag_source.set("2", True)
            await asyncio.sleep(0.1)
            await status_monitor.stop()

        asyncio.run(scenario())

        assert not status_monitor.is_running
        assert [m["type"] for m in subscriber.messages] == ["initial_status", "status_change"]

    def test_flip_during_slow_snapshot_still_reaches_newcomer(self, status_monitor, flag_source):
        subscriber = SlowSubscriber()

        async def scenario():
            joining = asyncio.create_task(status_monitor.subscribe(subscriber))
            await subscriber.sending.wait()
            flag_source.set("2", True)
            ticking = asyncio.create_task(status_monitor.tick())
            await asyncio.sleep(0)
            subscriber.release.set()
            await joining
            return await ticking

        changes = asyncio.run(scenario())

        assert [c.restaurant_id for c in changes] == ["2"]
        initial, change = subscriber.messages
        assert initial["statuses"]["2"] is False
        assert change["type"] == "status_change"
        assert change["changes"][0]["restaurantId"] == "2"
        assert change["changes"][0]["isOpen"] is True
