"""Configurable fake payment gateway for development and testing.

Simulates the gateway without any external calls. Signatures are real
HMAC-SHA256 digests over the configured secret, so webhook tests exercise the
same verification path as production.
"""

from uuid import uuid4

from storefront.gateway.port import (
    GatewayOrder,
    PaymentGateway,
    hmac_sha256_hex,
    signatures_match,
)


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, key_id: str = "fake_key", webhook_secret: str = "") -> None:
        self.key_id = key_id or "fake_key"
        self.webhook_secret = webhook_secret
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_order(
        self,
        amount_minor: int,
        currency: str,
        receipt: str,
        notes: dict | None = None,
    ) -> GatewayOrder:
        self.calls.append(
            {
                "method": "create_order",
                "amount_minor": amount_minor,
                "currency": currency,
                "receipt": receipt,
                "notes": dict(notes or {}),
            }
        )

        if self.should_succeed:
            return GatewayOrder(
                success=True,
                gateway_order_ref=f"order_fake{uuid4().hex[:12]}",
                amount_minor=amount_minor,
                currency=currency,
            )
        return GatewayOrder(success=False, failure_reason=self.failure_reason)

    def sign(self, payload: bytes) -> str:
        """Produce the signature the gateway would send for ``payload``."""
        return hmac_sha256_hex(self.webhook_secret, payload)

    def verify_webhook_signature(self, payload: bytes, signature: str | None) -> bool:
        if not self.webhook_secret:
            return False
        return signatures_match(self.sign(payload), signature)

    def verify_payment_signature(
        self,
        gateway_order_ref: str,
        gateway_payment_ref: str,
        signature: str | None,
    ) -> bool:
        if not self.webhook_secret:
            return False
        expected = hmac_sha256_hex(
            self.webhook_secret,
            f"{gateway_order_ref}|{gateway_payment_ref}".encode("utf-8"),
        )
        return signatures_match(expected, signature)
