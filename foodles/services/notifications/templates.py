"""
Email rendering.

Order emails are Jinja2 templates shipped in ``foodles/templates``. The
order-details payload comes straight from the checkout page, so every
field is optional and coerced leniently.
"""

import math
from functools import lru_cache
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape

from foodles.core.config import get_settings
from foodles.services.orders.models import OrderNotificationJob


def _to_amount(value: Any) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    # "nan", "inf" and overflowing JSON numbers such as 1e999
    return amount if math.isfinite(amount) else 0.0


def _rupees(value: Any) -> str:
    return f"₹{_to_amount(value):.2f}"


@lru_cache()
def get_template_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("foodles", "templates"),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["rupees"] = _rupees
    return env


def order_summary_context(order_details: dict[str, Any]) -> dict[str, Any]:
    """Flatten the checkout payload into template variables."""
    items = []
    for item in order_details.get("items") or []:
        if not isinstance(item, dict):
            continue
        quantity = int(_to_amount(item.get("quantity", 1)))
        items.append({
            "name": item.get("name", "Item"),
            "quantity": quantity,
            "line_total": _to_amount(item.get("price")) * quantity,
        })

    return {
        "items": items,
        "subtotal": _to_amount(order_details.get("subtotal")),
        "delivery_fee": _to_amount(order_details.get("deliveryFee")),
        "convenience_fee": _to_amount(order_details.get("convenienceFee")),
        "dog_donation": _to_amount(order_details.get("dogDonation")),
        "grand_total": _to_amount(order_details.get("grandTotal")),
    }


def order_summary_text(order_details: dict[str, Any]) -> str:
    context = order_summary_context(order_details)
    lines = [f"- {i['name']} x {i['quantity']}" for i in context["items"]]
    lines.append(f"Total: {_rupees(context['grand_total'])}")
    return "\n".join(lines)


def render_customer_email(job: OrderNotificationJob) -> tuple[str, str, str]:
    """Return (subject, html, text) for the customer confirmation."""
    brand = get_settings().email_brand_name
    html = get_template_environment().get_template("customer_order_confirmation.html").render(
        customer_name=job.customer_name,
        order_id=job.order_id,
        brand=brand,
        **order_summary_context(job.order_details),
    )
    text = (
        f"Dear {job.customer_name},\n"
        f"Thank you for your order #{job.order_id}!\n"
        f"{order_summary_text(job.order_details)}"
    )
    return f"Order Confirmation - {brand}", html, text


def render_vendor_email(job: OrderNotificationJob) -> tuple[str, str, str]:
    """Return (subject, html, text) for the vendor's new-order email."""
    brand = get_settings().email_brand_name
    html = get_template_environment().get_template("vendor_new_order.html").render(
        customer_name=job.customer_name,
        customer_email=job.customer_email,
        order_id=job.order_id,
        brand=brand,
        **order_summary_context(job.order_details),
    )
    text = (
        f"New order #{job.order_id} from {job.customer_name}\n"
        f"{order_summary_text(job.order_details)}"
    )
    return f"New Order #{job.order_id} - {brand}", html, text
