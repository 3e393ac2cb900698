"""
Razorpay Checkout Signature Verification

Razorpay signs a successful checkout with
HMAC-SHA256(key_secret, "<order_id>|<payment_id>") rendered as lowercase hex.
The server recomputes the digest and compares it to the value the browser
sent back; a mismatch means the payment cannot be trusted.
"""

import hashlib
import hmac


def generate_payment_signature(order_id: str, payment_id: str, secret: str) -> str:
    """Compute the hex signature Razorpay would attach to this order/payment pair."""
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_payment_signature(
    order_id: str,
    payment_id: str,
    secret: str,
    signature: str,
) -> bool:
    """
    Check a claimed checkout signature.

    Never raises: missing, non-string or unencodable input simply fails
    verification.

    Args:
        order_id: Gateway-assigned order id
        payment_id: Gateway-assigned payment id
        secret: Shared key secret
        signature: Signature claimed by the client

    Returns:
        bool: True only if the signature matches byte for byte
    """
    values = (order_id, payment_id, secret, signature)
    if not all(isinstance(v, str) and v for v in values):
        return False

    try:
        expected = generate_payment_signature(order_id, payment_id, secret)
        return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
    except UnicodeEncodeError:
        # Lone surrogates cannot be UTF-8 encoded
        return False
