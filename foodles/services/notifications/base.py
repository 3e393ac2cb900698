"""
Notification Service Abstract Base Classes

Defines the two provider interfaces the notification channels are built on:
    - BaseMailService: send one HTML message to one recipient
    - BaseTelephonyService: ring a vendor (missed call) or text them

Both have Mock (development) and Real (production) implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class DeliveryResult:
    """
    Result from one delivery attempt.

    ``attempted`` is False when delivery was skipped because the target or
    provider is not configured; such results are neither successes nor
    failures.
    """
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"
    attempted: bool = True

    @classmethod
    def not_attempted(cls, reason: str, provider: str = "unknown") -> "DeliveryResult":
        return cls(success=False, error_message=reason, provider=provider, attempted=False)


class BaseMailService(ABC):
    """Abstract base class for mail transports."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> DeliveryResult:
        """
        Send an email.

        A send the transport completes but the recipient server rejects
        must come back as ``success=False``.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check service connectivity."""
        pass


class BaseTelephonyService(ABC):
    """Abstract base class for per-restaurant telephony providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @property
    @abstractmethod
    def configured_restaurants(self) -> list[str]:
        """Restaurant ids that have telephony credentials."""
        pass

    def is_configured(self, restaurant_id: Optional[str]) -> bool:
        return restaurant_id is not None and str(restaurant_id) in self.configured_restaurants

    @abstractmethod
    async def place_missed_call(
        self,
        to_phone: str,
        restaurant_id: str,
    ) -> DeliveryResult:
        """
        Ring ``to_phone`` from the restaurant's number and hang up.

        Args:
            to_phone: Canonical phone number (+91XXXXXXXXXX)
            restaurant_id: Restaurant whose credentials place the call
        """
        pass

    @abstractmethod
    async def send_sms(
        self,
        to_phone: str,
        message: str,
        restaurant_id: str,
    ) -> DeliveryResult:
        """Send an SMS from the restaurant's number."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check service connectivity."""
        pass
