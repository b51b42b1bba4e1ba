"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- RazorpayGateway for production (GATEWAY_PROVIDER=razorpay)
"""

from storefront import config
from storefront.gateway.fake_adapter import FakeGateway
from storefront.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _build_gateway() -> PaymentGateway:
    if config.gateway_provider() == "razorpay":
        from storefront.gateway.razorpay_adapter import RazorpayGateway

        return RazorpayGateway(
            key_id=config.gateway_key_id(),
            key_secret=config.gateway_key_secret(),
            webhook_secret=config.webhook_secret(),
            base_url=config.gateway_base_url(),
        )
    if config.is_production():
        raise RuntimeError("GATEWAY_PROVIDER=fake is not allowed in production")
    return FakeGateway(key_id=config.gateway_key_id(), webhook_secret=config.webhook_secret())


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, built from configuration on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
