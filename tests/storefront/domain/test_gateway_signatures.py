"""Tests for gateway signature verification."""

import hashlib
import hmac

from storefront.gateway.fake_adapter import FakeGateway
from storefront.gateway.port import signatures_match
from storefront.gateway.razorpay_adapter import RazorpayGateway

BODY = b'{"event":"payment.captured"}'


def _sign(secret, body):
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class TestSignaturesMatch:
    def test_equal_signatures_match(self):
        assert signatures_match("abc123", "abc123")

    def test_surrounding_whitespace_is_ignored(self):
        assert signatures_match("abc123", " abc123\n")

    def test_missing_signature_never_matches(self):
        assert not signatures_match("abc123", None)
        assert not signatures_match("abc123", "")


class TestFakeGatewaySignatures:
    def test_accepts_body_signed_with_secret(self):
        gateway = FakeGateway(webhook_secret="s3cret")
        assert gateway.verify_webhook_signature(BODY, _sign("s3cret", BODY))

    def test_rejects_tampered_body(self):
        gateway = FakeGateway(webhook_secret="s3cret")
        signature = _sign("s3cret", BODY)
        assert not gateway.verify_webhook_signature(BODY.replace(b"captured", b"failed"), signature)

    def test_rejects_other_secret(self):
        gateway = FakeGateway(webhook_secret="s3cret")
        assert not gateway.verify_webhook_signature(BODY, _sign("other", BODY))

    def test_sign_helper_matches_verification(self):
        gateway = FakeGateway(webhook_secret="s3cret")
        assert gateway.verify_webhook_signature(BODY, gateway.sign(BODY))

    def test_unconfigured_secret_rejects_everything(self):
        gateway = FakeGateway(webhook_secret="")
        assert not gateway.verify_webhook_signature(BODY, gateway.sign(BODY))
        assert not gateway.verify_webhook_signature(BODY, _sign("test-webhook-secret", BODY))
        assert not gateway.verify_payment_signature("order_1", "pay_1", _sign("", b"order_1|pay_1"))


class TestRazorpaySignatures:
    def test_webhook_signature(self):
        gateway = RazorpayGateway(key_id="rzp_test", key_secret="key-secret", webhook_secret="hook-secret")
        assert gateway.verify_webhook_signature(BODY, _sign("hook-secret", BODY))
        assert not gateway.verify_webhook_signature(BODY, _sign("key-secret", BODY))

    def test_unconfigured_webhook_secret_rejects_everything(self):
        gateway = RazorpayGateway(key_id="rzp_test", key_secret="key-secret", webhook_secret="")
        assert not gateway.verify_webhook_signature(BODY, _sign("", BODY))

    def test_checkout_signature_uses_key_secret(self):
        gateway = RazorpayGateway(key_id="rzp_test", key_secret="key-secret", webhook_secret="hook-secret")
        signature = _sign("key-secret", b"order_1|pay_1")
        assert gateway.verify_payment_signature("order_1", "pay_1", signature)
        assert not gateway.verify_payment_signature("order_1", "pay_2", signature)
