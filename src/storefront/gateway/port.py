"""Payment gateway port (abstract interface).

Defines the contract that gateway adapters implement, so that FakeGateway
(dev/test) and RazorpayGateway (production) are interchangeable without
touching domain or application code.
"""

import hashlib
import hmac
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class GatewayOrder:
    """A payment order opened on the gateway."""

    success: bool
    gateway_order_ref: str | None = None
    amount_minor: int | None = None
    currency: str | None = None
    failure_reason: str | None = None
    raw: dict = field(default_factory=dict)


def hmac_sha256_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def signatures_match(expected: str, provided: str | None) -> bool:
    """Constant-time comparison of two hex signatures."""
    if not provided:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), provided.strip().encode("utf-8"))


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    key_id: str = ""

    @abstractmethod
    def create_order(
        self,
        amount_minor: int,
        currency: str,
        receipt: str,
        notes: dict | None = None,
    ) -> GatewayOrder:
        """Open a payment order on the gateway for ``amount_minor`` (paise, cents)."""
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: bytes, signature: str | None) -> bool:
        """Verify that a webhook body is authentically from the gateway."""
        ...

    @abstractmethod
    def verify_payment_signature(
        self,
        gateway_order_ref: str,
        gateway_payment_ref: str,
        signature: str | None,
    ) -> bool:
        """Verify the checkout signature the gateway hands to the client."""
        ...
