"""
Real Notification Services

Production implementations using:
- SendGrid for Email
- Twilio for vendor missed calls and SMS (one account per restaurant)

Both SDKs are synchronous, so every request runs in a worker thread to
keep the event loop free.
"""

import asyncio
import logging
from typing import Optional

from python_http_client.exceptions import HTTPError as SendGridHTTPError
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from twilio.rest import Client as TwilioClient
from twilio.base.exceptions import TwilioException, TwilioRestException

from foodles.core.config import get_settings, TwilioCredentials
from foodles.services.notifications.base import (
    BaseMailService,
    BaseTelephonyService,
    DeliveryResult,
)

logger = logging.getLogger(__name__)

SENDGRID_ACCEPTED = (200, 201, 202)


class SendGridMailService(BaseMailService):
    """Production mail transport using SendGrid."""

    def __init__(self, api_key: Optional[str] = None, from_email: Optional[str] = None):
        settings = get_settings()
        api_key = api_key or settings.sendgrid_api_key

        if api_key:
            self.sendgrid_client = SendGridAPIClient(api_key)
        else:
            self.sendgrid_client = None
            logger.warning("SendGrid credentials not configured")

        self.from_email = from_email or settings.sendgrid_from_email
        logger.info("SendGridMailService initialized")

    @property
    def provider_name(self) -> str:
        return "sendgrid"

    async def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> DeliveryResult:
        """Send email via SendGrid."""
        if not self.sendgrid_client:
            return DeliveryResult(
                success=False,
                error_message="SendGrid not configured",
                provider="sendgrid",
            )

        message = Mail(
            from_email=self.from_email,
            to_emails=to_email,
            subject=subject,
            html_content=body_html,
            plain_text_content=body_text,
        )

        try:
            response = await asyncio.to_thread(self.sendgrid_client.send, message)
        except SendGridHTTPError as e:
            logger.error(f"SendGrid rejected email to {to_email}: {e.status_code} {e.body}")
            return DeliveryResult(
                success=False,
                error_message=f"Rejected by mail server ({e.status_code})",
                provider="sendgrid",
            )
        except Exception as e:
            logger.error(f"SendGrid error: {e}")
            return DeliveryResult(
                success=False,
                error_message=str(e),
                provider="sendgrid",
            )

        if response.status_code not in SENDGRID_ACCEPTED:
            logger.warning(f"Email to {to_email} not accepted: {response.status_code}")
            return DeliveryResult(
                success=False,
                error_message=f"Rejected by mail server ({response.status_code})",
                provider="sendgrid",
            )

        logger.info(f"Email sent to {to_email}: {response.status_code}")
        return DeliveryResult(
            success=True,
            message_id=response.headers.get("X-Message-Id"),
            provider="sendgrid",
        )

    async def health_check(self) -> bool:
        return self.sendgrid_client is not None


class TwilioTelephonyService(BaseTelephonyService):
    """
    Production telephony using one Twilio account per restaurant.

    The missed call points at a TwiML document that rejects the call, so
    the vendor's phone rings for at most ``ring_timeout`` seconds and the
    call never connects.
    """

    def __init__(
        self,
        credentials: Optional[dict[str, TwilioCredentials]] = None,
        twiml_url: Optional[str] = None,
        ring_timeout: Optional[int] = None,
    ):
        settings = get_settings()
        credentials = settings.twilio_credentials if credentials is None else credentials

        self._clients: dict[str, tuple[TwilioClient, Optional[str]]] = {}
        for restaurant_id, creds in credentials.items():
            self._clients[restaurant_id] = (
                TwilioClient(creds.account_sid, creds.auth_token),
                creds.phone_number,
            )
            logger.info(f"✓ Twilio initialized for Restaurant {restaurant_id}")

        for restaurant_id in ("1", "2", "3"):
            if restaurant_id not in self._clients:
                logger.warning(f"⚠️ Missing Twilio credentials for Restaurant {restaurant_id}")

        self.twiml_url = twiml_url or settings.missed_call_twiml_url
        self.ring_timeout = ring_timeout or settings.missed_call_timeout_seconds

    @property
    def provider_name(self) -> str:
        return "twilio"

    @property
    def configured_restaurants(self) -> list[str]:
        return sorted(self._clients)

    async def place_missed_call(self, to_phone: str, restaurant_id: str) -> DeliveryResult:
        """Create a short outbound call via Twilio."""
        if not self.is_configured(restaurant_id):
            return DeliveryResult.not_attempted(
                f"No Twilio configuration for restaurant {restaurant_id}",
                provider="twilio",
            )

        client, from_phone = self._clients[str(restaurant_id)]
        logger.info(f"📞 Restaurant {restaurant_id}: calling {to_phone} from {from_phone}")

        try:
            call = await asyncio.to_thread(
                client.calls.create,
                url=self.twiml_url,
                from_=from_phone,
                to=to_phone,
                timeout=self.ring_timeout,
            )
        except TwilioRestException as e:
            logger.error(f"❌ Twilio error for restaurant {restaurant_id}: {e.code} {e.msg}")
            return DeliveryResult(
                success=False,
                error_message=f"{e.code}: {e.msg}",
                provider="twilio",
            )
        except TwilioException as e:
            logger.error(f"❌ Twilio error for restaurant {restaurant_id}: {e}")
            return DeliveryResult(success=False, error_message=str(e), provider="twilio")

        logger.info(f"✅ Call created: {call.sid} status={call.status}")
        return DeliveryResult(success=True, message_id=call.sid, provider="twilio")

    async def send_sms(self, to_phone: str, message: str, restaurant_id: str) -> DeliveryResult:
        """Send SMS via the restaurant's Twilio number."""
        if not self.is_configured(restaurant_id):
            return DeliveryResult.not_attempted(
                f"No Twilio configuration for restaurant {restaurant_id}",
                provider="twilio",
            )

        client, from_phone = self._clients[str(restaurant_id)]

        try:
            result = await asyncio.to_thread(
                client.messages.create,
                body=message,
                from_=from_phone,
                to=to_phone,
            )
        except TwilioException as e:
            logger.error(f"Twilio SMS error: {e}")
            return DeliveryResult(success=False, error_message=str(e), provider="twilio")

        logger.info(f"SMS sent to {to_phone}: {result.sid}")
        return DeliveryResult(success=True, message_id=result.sid, provider="twilio")

    async def health_check(self) -> bool:
        return bool(self._clients)
