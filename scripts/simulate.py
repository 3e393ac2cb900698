"""
Checkout Simulation Script

Fires concurrent verify-payment requests at a running backend (including
duplicates and forged signatures), then polls /email-status for each
verified order.
Run from project root: python scripts/simulate.py

The backend must be running with the same RAZORPAY_KEY_SECRET (or none,
in development mode, where the mock secret is used).
"""

import asyncio
import sys
import os
import json
import random
import time
import uuid
import argparse
from datetime import datetime
from typing import Any

import httpx
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from foodles.services.payment import generate_payment_signature
from foodles.services.payment.mock import MOCK_KEY_SECRET

# Configuration
API_BASE_URL = "http://localhost:5000"
TOTAL_ORDERS = 30
DUPLICATE_RATE = 0.2
FORGED_RATE = 0.1

# Sample data for random orders
FIRST_NAMES = ["Asha", "Rahul", "Priya", "Vikram", "Neha", "Arjun", "Kavya", "Rohan", "Isha", "Dev"]
LAST_NAMES = ["Verma", "Sharma", "Iyer", "Reddy", "Gupta", "Nair", "Mehta", "Singh", "Das", "Rao"]
RESTAURANTS = {
    "1": {"email": "kitchen1@example.com", "phone": "98765 43210"},
    "2": {"email": "kitchen2@example.com", "phone": "+91 91234 56789"},
    "3": {"email": "kitchen3@example.com", "phone": "091-99887-76655"},
}
MENU_ITEMS = [
    {"name": "Paneer Butter Masala", "price": 240},
    {"name": "Dal Makhani", "price": 180},
    {"name": "Butter Naan", "price": 45},
    {"name": "Veg Biryani", "price": 220},
    {"name": "Gulab Jamun", "price": 60},
    {"name": "Masala Chaas", "price": 40},
]


def generate_order_details() -> dict[str, Any]:
    """Generate a random cart in the frontend's orderDetails shape."""
    items = []
    for item in random.sample(MENU_ITEMS, random.randint(1, 4)):
        items.append({**item, "quantity": random.randint(1, 3)})

    subtotal = sum(i["price"] * i["quantity"] for i in items)
    delivery_fee, convenience_fee, dog_donation = 30, 10, random.choice([0, 5])
    return {
        "items": items,
        "subtotal": subtotal,
        "deliveryFee": delivery_fee,
        "convenienceFee": convenience_fee,
        "dogDonation": dog_donation,
        "grandTotal": subtotal + delivery_fee + convenience_fee + dog_donation,
    }


def generate_verify_payload(secret: str, forged: bool = False) -> dict[str, Any]:
    """Generate a signed verify-payment body."""
    first, last = random.choice(FIRST_NAMES), random.choice(LAST_NAMES)
    restaurant_id = random.choice(list(RESTAURANTS))
    vendor = RESTAURANTS[restaurant_id]

    gateway_order_id = f"order_{uuid.uuid4().hex[:14]}"
    payment_id = f"pay_{uuid.uuid4().hex[:14]}"
    signature = generate_payment_signature(gateway_order_id, payment_id, secret)
    if forged:
        signature = signature[::-1]

    return {
        "razorpayOrderId": gateway_order_id,
        "razorpayPaymentId": payment_id,
        "razorpaySignature": signature,
        "customerName": f"{first} {last}",
        "customerEmail": f"{first.lower()}.{last.lower()}@example.com",
        "orderDetails": json.dumps(generate_order_details()),
        "orderId": f"FD{random.randint(100000, 999999)}",
        "vendorEmail": vendor["email"],
        "vendorPhone": vendor["phone"],
        "restaurantId": restaurant_id,
    }


async def send_verify(
    client: httpx.AsyncClient,
    order_num: int,
    payload: dict[str, Any],
) -> dict[str, Any]:
    """POST one verify-payment request."""
    start_time = time.time()

    try:
        response = await client.post(
            f"{API_BASE_URL}/payment/verify-payment",
            json=payload,
            timeout=30.0
        )
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 200:
            data = response.json()
            return {
                "order_num": order_num,
                "success": True,
                "verified": data.get("verified", False),
                "order_id": payload["orderId"],
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def poll_email_status(
    client: httpx.AsyncClient,
    order_id: str,
    attempts: int = 20,
    delay: float = 0.5,
) -> dict[str, Any]:
    """Poll until the order reports at least one email sent or error."""
    data: dict[str, Any] = {}
    for _ in range(attempts):
        response = await client.get(f"{API_BASE_URL}/email-status/{order_id}")
        data = response.json()
        if data.get("emailsSent") or data.get("emailErrors"):
            break
        await asyncio.sleep(delay)
    return data


async def run_simulation(num_orders: int, secret: str) -> dict[str, Any]:
    """
    Run the checkout simulation.

    Args:
        num_orders: Number of distinct checkouts to fire
        secret: Razorpay key secret used to sign requests
    """
    print("=" * 70)
    print("🔥 CHECKOUT SIMULATION - HIGH CONCURRENCY TEST")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    requests = []
    for i in range(num_orders):
        payload = generate_verify_payload(secret, forged=random.random() < FORGED_RATE)
        requests.append(payload)
        if random.random() < DUPLICATE_RATE:
            requests.append(payload)
    random.shuffle(requests)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        print(f"\n🚀 Firing {len(requests)} verify requests...\n")
        tasks = [send_verify(client, i + 1, p) for i, p in enumerate(requests)]
        results = await asyncio.gather(*tasks)

        verified_ids = sorted({r["order_id"] for r in results if r.get("verified")})
        print(f"⏳ Polling notification status for {len(verified_ids)} orders...\n")
        statuses = await asyncio.gather(*[poll_email_status(client, o) for o in verified_ids])

    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    rejected = [r for r in successful if not r["verified"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)

    print(f"\n✅ Answered: {len(successful)}/{len(requests)}")
    print(f"🔒 Rejected signatures: {len(rejected)}")
    print(f"❌ Transport errors: {len(failed)}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"\n📈 Performance Metrics:")
        print(f"   Average Response: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")

    emails = sum(s.get("emailsSent", 0) for s in statuses)
    errors = sum(len(s.get("emailErrors", [])) for s in statuses)
    calls = [s.get("missedCallStatus") for s in statuses]
    print(f"\n📧 Emails sent: {emails} ({errors} errors)")
    print(f"📞 Missed calls: {calls.count('success')} ok, {calls.count('failed')} failed, "
          f"{calls.count(None)} not attempted")

    if failed:
        print(f"\n⚠️  Failed Request Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Request #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)

    return {
        "total": len(requests),
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Checkout Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="Backend base URL")
    parser.add_argument(
        "--secret",
        default=os.environ.get("RAZORPAY_KEY_SECRET") or MOCK_KEY_SECRET,
        help="Razorpay key secret used to sign requests",
    )
    args = parser.parse_args()

    API_BASE_URL = args.url.rstrip("/")
    asyncio.run(run_simulation(args.orders, args.secret))
