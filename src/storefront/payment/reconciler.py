"""Payment reconciliation shared by the client and webhook confirmation paths.

The browser and the gateway webhook race to report the same payment. Whichever
arrives first records it with one conditional write keyed on the order still
being unpaid; the other finds the order already paid and succeeds without
touching it. Duplicate deliveries behave the same way.
"""

import structlog
from protean.utils.globals import current_domain

from storefront.exceptions import Conflict, OrderNotPayable
from storefront.order.order import ConfirmationChannel, Order, PaymentStatus
from storefront.order.transitions import OrderStatus, is_transition_allowed

logger = structlog.get_logger(__name__)

PAID = "paid"
ALREADY_PAID = "already_paid"


def reconcile_payment(
    order_id,
    gateway_payment_ref: str,
    channel: ConfirmationChannel,
    amount: float | None = None,
    order: Order | None = None,
) -> str:
    """Mark ``order_id`` paid and move it to processing, at most once.

    Returns ``PAID`` when this call recorded the payment and ``ALREADY_PAID``
    when an earlier call did.

    Raises:
        OrderNotPayable: the order is no longer awaiting payment.
        Conflict: the order changed concurrently and is still unpaid.
    """
    repo = current_domain.repository_for(Order)
    if order is None:
        order = repo.load(order_id)

    if order.is_paid:
        logger.info(
            "Payment already recorded",
            order_id=str(order.id),
            channel=channel.value,
            confirmed_via=order.payment.confirmed_via,
        )
        return ALREADY_PAID

    observed_status = order.status
    if order.payment_status != PaymentStatus.PENDING.value or not is_transition_allowed(
        observed_status, OrderStatus.PROCESSING
    ):
        raise OrderNotPayable(
            f"Order {order.id} cannot accept payment",
            order_id=str(order.id),
            current_status=observed_status,
            payment_status=order.payment_status,
        )

    if amount is not None and round(amount, 2) != round(order.total, 2):
        logger.warning(
            "Paid amount differs from order total",
            order_id=str(order.id),
            amount=amount,
            total=order.total,
        )

    order.record_payment(gateway_payment_ref, channel, amount=amount)
    try:
        repo.compare_and_set(
            order,
            expected_status=observed_status,
            expected_payment_status=PaymentStatus.PENDING.value,
        )
    except Conflict:
        if repo.reload(order.id).is_paid:
            logger.info(
                "Payment recorded by the other confirmation path",
                order_id=str(order.id),
                channel=channel.value,
            )
            return ALREADY_PAID
        raise

    logger.info(
        "Payment recorded",
        order_id=str(order.id),
        channel=channel.value,
        gateway_payment_ref=gateway_payment_ref,
    )
    return PAID
