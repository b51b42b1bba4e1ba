"""Razorpay payment gateway adapter.

Talks to the Razorpay Orders API over HTTPS with basic auth. Transient
failures (connection errors, 429 and 5xx answers) are retried a bounded
number of times with exponential backoff; anything else comes back as a
failed ``GatewayOrder``.
"""

import time

import requests
import structlog

from storefront.gateway.port import (
    GatewayOrder,
    PaymentGateway,
    hmac_sha256_hex,
    signatures_match,
)

logger = structlog.get_logger(__name__)

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class RazorpayGateway(PaymentGateway):
    """Production gateway adapter."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        webhook_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
        timeout: float = 10.0,
    ) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.timeout = timeout

        self.session = requests.Session()
        self.session.auth = (key_id, key_secret)
        self.session.headers.update({"Accept": "application/json"})

    def _post(self, path: str, body: dict) -> requests.Response | None:
        url = f"{self.base_url}{path}"
        for attempt in range(self.max_retries):
            try:
                resp = self.session.post(url, json=body, timeout=self.timeout)
            except requests.exceptions.RequestException as exc:
                logger.warning(
                    "Gateway request failed",
                    url=url,
                    attempt=attempt + 1,
                    error=str(exc),
                )
            else:
                if resp.status_code not in _RETRYABLE_STATUS:
                    return resp
                logger.warning(
                    "Gateway answered with retryable status",
                    url=url,
                    attempt=attempt + 1,
                    status_code=resp.status_code,
                )

            if attempt < self.max_retries - 1:
                time.sleep(self.backoff_seconds * 2**attempt)
        return None

    def create_order(
        self,
        amount_minor: int,
        currency: str,
        receipt: str,
        notes: dict | None = None,
    ) -> GatewayOrder:
        body = {
            "amount": amount_minor,
            "currency": currency,
            "receipt": receipt,
            "notes": {key: str(value) for key, value in (notes or {}).items()},
        }
        resp = self._post("/orders", body)
        if resp is None:
            return GatewayOrder(success=False, failure_reason="Gateway unreachable")

        try:
            data = resp.json()
        except ValueError:
            data = {}

        if resp.status_code >= 400 or "id" not in data:
            reason = (data.get("error") or {}).get("description") or f"HTTP {resp.status_code}"
            logger.error("Gateway refused order creation", status_code=resp.status_code, reason=reason)
            return GatewayOrder(success=False, failure_reason=reason, raw=data)

        return GatewayOrder(
            success=True,
            gateway_order_ref=data["id"],
            amount_minor=data.get("amount", amount_minor),
            currency=data.get("currency", currency),
            raw=data,
        )

    def verify_webhook_signature(self, payload: bytes, signature: str | None) -> bool:
        if not self.webhook_secret:
            logger.error("Webhook secret is not configured; rejecting webhook")
            return False
        return signatures_match(hmac_sha256_hex(self.webhook_secret, payload), signature)

    def verify_payment_signature(
        self,
        gateway_order_ref: str,
        gateway_payment_ref: str,
        signature: str | None,
    ) -> bool:
        expected = hmac_sha256_hex(
            self.key_secret,
            f"{gateway_order_ref}|{gateway_payment_ref}".encode("utf-8"),
        )
        return signatures_match(expected, signature)
