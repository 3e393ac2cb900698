"""
Pydantic Schemas for Request/Response Validation

The checkout frontend speaks camelCase JSON; every schema here uses
snake_case attributes with camelCase aliases, and accepts either form on
input.
"""

import json
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from foodles.services.orders.models import NotificationOutcome, OrderNotificationJob
from foodles.services.restaurants.cache import RestaurantStatus, StatusBatch


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _parse_order_details(v: Any) -> Any:
    """orderDetails arrives JSON-encoded; decode it (dicts pass through)."""
    if v is None or v == "":
        return {}
    if isinstance(v, str):
        try:
            v = json.loads(v)
        except json.JSONDecodeError:
            raise ValueError("orderDetails must be a JSON-encoded object")
    if not isinstance(v, dict):
        raise ValueError("orderDetails must be a JSON object")
    return v


def _optional_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    v = str(v).strip()
    return v or None


# =============================================================================
# PAYMENT
# =============================================================================

class VerifyPaymentRequest(CamelModel):
    """Body of POST /payment/verify-payment, sent right after checkout."""

    razorpay_order_id: str = Field(..., examples=["order_9A33XWu170gUtm"])
    razorpay_payment_id: str = Field(..., examples=["pay_29QQoUBi66xm2f"])
    razorpay_signature: str = Field(...)

    customer_name: str = Field(..., min_length=1, max_length=100, examples=["Asha Verma"])
    customer_email: str = Field(..., examples=["asha@example.com"])
    order_details: dict[str, Any] = Field(default_factory=dict)
    order_id: str = Field(..., min_length=1, max_length=100, examples=["X1"])

    vendor_email: Optional[str] = Field(None, examples=["kitchen@babaji.example"])
    vendor_phone: Optional[str] = Field(None, examples=["98765 43210"])
    restaurant_id: Optional[str] = Field(None, examples=["1"])

    @field_validator("order_details", mode="before")
    @classmethod
    def decode_order_details(cls, v: Any) -> Any:
        return _parse_order_details(v)

    @field_validator("vendor_email", "vendor_phone", "restaurant_id", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        return _optional_str(v)

    def to_job(self) -> OrderNotificationJob:
        return OrderNotificationJob(
            order_id=self.order_id,
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            order_details=self.order_details,
            vendor_email=self.vendor_email,
            vendor_phone=self.vendor_phone,
            restaurant_id=self.restaurant_id,
        )


class VerifyPaymentResponse(CamelModel):
    verified: bool
    order_id: Optional[str] = None
    vendor_notified: Optional[bool] = None


class PaymentDetailsSchema(CamelModel):
    id: Optional[str] = None
    amount: Optional[float] = None
    currency: str = "INR"
    method: Optional[str] = None
    captured_at: Optional[int] = None


class PaymentLookupResponse(CamelModel):
    status: str
    payment_details: Optional[PaymentDetailsSchema] = None
    message: Optional[str] = None


# =============================================================================
# NOTIFICATION STATUS
# =============================================================================

class EmailErrorSchema(CamelModel):
    type: str
    error: str


class EmailStatusResponse(CamelModel):
    """Polled by the order-confirmation page."""
    emails_sent: int = 0
    email_errors: list[EmailErrorSchema] = Field(default_factory=list)
    missed_call_status: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: NotificationOutcome) -> "EmailStatusResponse":
        return cls.model_validate(outcome.to_dict())


# =============================================================================
# RESTAURANT STATUS
# =============================================================================

class RestaurantStatusResponse(CamelModel):
    is_open: bool
    message: str
    last_checked: datetime

    @classmethod
    def from_status(cls, status: RestaurantStatus) -> "RestaurantStatusResponse":
        return cls(
            is_open=status.is_open,
            message=status.message,
            last_checked=status.last_checked,
        )


class RestaurantStatusBatchResponse(CamelModel):
    statuses: dict[str, RestaurantStatusResponse]
    is_from_cache: bool
    last_updated: datetime
    next_update: datetime

    @classmethod
    def from_batch(cls, batch: StatusBatch) -> "RestaurantStatusBatchResponse":
        return cls(
            statuses={
                rid: RestaurantStatusResponse.from_status(s)
                for rid, s in batch.statuses.items()
            },
            is_from_cache=batch.is_from_cache,
            last_updated=batch.last_updated,
            next_update=batch.next_update,
        )


class RestaurantSelectionLog(CamelModel):
    restaurant_id: str
    restaurant_name: Optional[str] = None
    timestamp: Optional[str] = None

    @field_validator("restaurant_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


# =============================================================================
# DIRECT NOTIFICATIONS
# =============================================================================

class ContactRequest(CamelModel):
    """
    Body of POST /contact. Fields are optional here so the route can
    answer a missing field with its own 400 message.
    """
    name: Optional[str] = None
    receiver_email: Optional[str] = None
    order_details: Optional[dict[str, Any]] = None

    @field_validator("order_details", mode="before")
    @classmethod
    def decode_order_details(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        return _parse_order_details(v)


class VendorSmsRequest(CamelModel):
    vendor_phone_number: str = Field(..., min_length=1)
    order_id: str = Field(..., min_length=1)
    restaurant_id: str = Field(..., min_length=1)

    @field_validator("order_id", "restaurant_id", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


# =============================================================================
# HEALTH
# =============================================================================

class HealthResponse(CamelModel):
    status: str
    environment: str
    payment_service: str
    mail_service: str
    telephony_service: str
    telephony_restaurants: list[str]
    status_subscribers: int
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None
