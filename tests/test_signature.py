"""
Tests for Razorpay checkout signature verification.
"""

import hashlib
import hmac

from foodles.services.payment import (
    MockPaymentService,
    generate_payment_signature,
    verify_payment_signature,
)

SECRET = "s3cr3t"


class TestSignature:
    """HMAC-SHA256 over "<order_id>|<payment_id>"."""

    def test_signature_is_hmac_of_order_and_payment(self):
        expected = hmac.new(
            SECRET.encode(), b"order_1|pay_1", hashlib.sha256
        ).hexdigest()

        assert generate_payment_signature("order_1", "pay_1", SECRET) == expected

    def test_valid_signature_verifies(self):
        signature = generate_payment_signature("order_1", "pay_1", SECRET)

        assert verify_payment_signature("order_1", "pay_1", SECRET, signature) is True

    def test_tampered_signature_fails(self):
        signature = generate_payment_signature("order_1", "pay_1", SECRET)
        tampered = ("0" if signature[0] != "0" else "1") + signature[1:]

        assert verify_payment_signature("order_1", "pay_1", SECRET, tampered) is False

    def test_comparison_is_case_sensitive(self):
        """Signatures are lowercase hex; an uppercased copy is not the same bytes."""
        signature = generate_payment_signature("order_1", "pay_1", SECRET)

        assert verify_payment_signature("order_1", "pay_1", SECRET, signature.upper()) is False

    def test_swapped_ids_fail(self):
        signature = generate_payment_signature("order_1", "pay_1", SECRET)

        assert verify_payment_signature("pay_1", "order_1", SECRET, signature) is False

    def test_wrong_secret_fails(self):
        signature = generate_payment_signature("order_1", "pay_1", "other")

        assert verify_payment_signature("order_1", "pay_1", SECRET, signature) is False

    def test_missing_values_fail_without_raising(self):
        signature = generate_payment_signature("order_1", "pay_1", SECRET)

        assert verify_payment_signature("", "pay_1", SECRET, signature) is False
        assert verify_payment_signature("order_1", "pay_1", SECRET, "") is False
        assert verify_payment_signature("order_1", "pay_1", None, signature) is False
        assert verify_payment_signature("order_1", None, SECRET, signature) is False

    def test_unencodable_values_fail_without_raising(self):
        signature = generate_payment_signature("order_1", "pay_1", SECRET)

        assert verify_payment_signature("order_1", "pay_1", SECRET, "\ud800") is False
        assert verify_payment_signature("order_\ud800", "pay_1", SECRET, signature) is False
        assert verify_payment_signature("order_1", "pay_\udfff", SECRET, signature) is False
        assert verify_payment_signature("order_1", "pay_1", "\ud800", signature) is False

    def test_service_verifies_with_its_own_secret(self):
        service = MockPaymentService(key_secret=SECRET, min_latency=0.0, max_latency=0.0)
        signature = generate_payment_signature("order_1", "pay_1", SECRET)

        assert service.verify_signature("order_1", "pay_1", signature) is True
        assert service.verify_signature("order_1", "pay_2", signature) is False
