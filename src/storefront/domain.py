"""Storefront bounded context — Order Lifecycle & Payment Reconciliation.

Owns the order status graph, reconciles client and gateway payment
confirmations into a single conditional write, arbitrates cancellation and
replacement requests, and emits best-effort user notifications.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

storefront = Domain(name="storefront")

logger = get_logger(__name__)
