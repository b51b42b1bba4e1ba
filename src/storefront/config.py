"""Application settings read from the environment.

Protean infrastructure (databases, brokers, event processing) is configured in
``domain.toml``. The values here are secrets and deployment knobs that belong
to the storefront itself. They are read on every call so tests can override
them with ``monkeypatch.setenv``.
"""

import os

DEFAULT_CURRENCY = "INR"
DEFAULT_GATEWAY_BASE_URL = "https://api.razorpay.com/v1"


def environment() -> str:
    return os.environ.get("PROTEAN_ENV", "development")


def is_production() -> bool:
    return environment() == "production"


def webhook_secret() -> str:
    """Shared secret used to sign gateway webhook bodies (HMAC-SHA256)."""
    return os.environ.get("PAYMENT_WEBHOOK_SECRET", "")


def gateway_provider() -> str:
    """Which gateway adapter to use: ``fake`` (default) or ``razorpay``."""
    return os.environ.get("GATEWAY_PROVIDER", "fake").lower()


def gateway_key_id() -> str:
    """Public key id handed to the browser checkout widget."""
    return os.environ.get("GATEWAY_KEY_ID", "")


def gateway_key_secret() -> str:
    return os.environ.get("GATEWAY_KEY_SECRET", "")


def gateway_base_url() -> str:
    return os.environ.get("GATEWAY_BASE_URL", DEFAULT_GATEWAY_BASE_URL)


def store_currency() -> str:
    return os.environ.get("STORE_CURRENCY", DEFAULT_CURRENCY)


def admin_api_key() -> str:
    return os.environ.get("ADMIN_API_KEY", "")
