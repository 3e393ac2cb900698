"""
Payment Service Abstract Base Class

Defines the interface contract for payment gateway implementations.
Both MockPaymentService and RazorpayPaymentService implement these methods,
so the HTTP layer behaves identically regardless of which one is active.

Design Pattern: Strategy Pattern
    - Allows runtime switching between the mock and the real gateway
    - Facilitates testing with the mock implementation
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from foodles.services.payment.signature import verify_payment_signature


# Statuses for which the order is treated as paid
CAPTURED_STATUSES = ("captured", "authorized")


@dataclass
class PaymentDetails:
    """
    Standardized result of a payment lookup.

    Attributes:
        success: Whether the gateway answered the lookup
        payment_id: Gateway payment id (Razorpay format: pay_xxx)
        status: Gateway status (created, authorized, captured, refunded, failed)
        amount: Amount in major units (rupees, converted from paise)
        currency: Currency code (e.g., "INR")
        method: Payment method (card, upi, netbanking, ...)
        captured_at: Unix timestamp of capture, if any
        error_message: Error description if the lookup failed
    """
    success: bool
    payment_id: Optional[str] = None
    status: Optional[str] = None
    amount: Optional[float] = None
    currency: str = "INR"
    method: Optional[str] = None
    captured_at: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def is_captured(self) -> bool:
        return self.success and self.status in CAPTURED_STATUSES

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.payment_id,
            "amount": self.amount,
            "currency": self.currency,
            "method": self.method,
            "capturedAt": self.captured_at,
        }


class BasePaymentService(ABC):
    """
    Abstract base class for payment gateways.

    Signature verification is shared: it only needs the key secret, and
    must behave the same in every mode.
    """

    def __init__(self, key_secret: str):
        self._key_secret = key_secret

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the payment provider.

        Returns:
            str: Provider name (e.g., "mock", "razorpay")
        """
        pass

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """
        Verify that the gateway really authorized this payment.

        Args:
            order_id: Gateway order id
            payment_id: Gateway payment id
            signature: Signature returned by the checkout widget

        Returns:
            bool: True if authentic
        """
        return verify_payment_signature(order_id, payment_id, self._key_secret, signature)

    @abstractmethod
    async def fetch_payment(self, payment_id: str) -> PaymentDetails:
        """
        Look up a payment at the gateway.

        Args:
            payment_id: Gateway payment id

        Returns:
            PaymentDetails: Standardized lookup result
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the payment gateway.

        Returns:
            bool: True if service is reachable and operational
        """
        pass
