"""Gateway webhook processing.

The raw request body is authenticated before anything else looks at it. Only
then is it parsed and turned into a ``RecordWebhookPayment`` command, which
shares the reconciliation path with client confirmations.

Envelope (Razorpay)::

    {"event": "payment.captured",
     "payload": {"payment": {"entity": {
         "id": "pay_...", "order_id": "order_...", "amount": 49900,
         "notes": {"order_id": "<storefront order id>"}}}}}
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import InvalidSignature, MalformedPayload, OrderNotPayable
from storefront.gateway import get_gateway
from storefront.order.order import ConfirmationChannel, Order
from storefront.payment.reconciler import reconcile_payment

logger = structlog.get_logger(__name__)

RECONCILED_EVENTS = frozenset({"payment.authorized", "payment.captured"})

IGNORED = "ignored"
UNKNOWN_ORDER = "unknown_order"
NOT_PAYABLE = "not_payable"


@storefront.command(part_of="Order")
class RecordWebhookPayment:
    order_id = Identifier(required=True)
    gateway_payment_ref = String(required=True, max_length=255)
    gateway_order_ref = String(max_length=255)
    amount = Float()


@storefront.command_handler(part_of=Order)
class RecordWebhookPaymentHandler:
    @handle(RecordWebhookPayment)
    def record_payment(self, command):
        order = current_domain.repository_for(Order).load(command.order_id)

        stored_ref = order.payment.gateway_order_ref if order.payment else None
        if command.gateway_order_ref and stored_ref and command.gateway_order_ref != stored_ref:
            logger.warning(
                "Webhook gateway order reference differs from stored one",
                order_id=str(order.id),
                stored=stored_ref,
                received=command.gateway_order_ref,
            )

        return reconcile_payment(
            order.id,
            command.gateway_payment_ref,
            ConfirmationChannel.WEBHOOK,
            amount=command.amount,
            order=order,
        )


def _extract_payment(payload: dict) -> dict | None:
    """Pull the payment details out of the envelope, or None if it names no storefront order."""
    try:
        entity = payload["payload"]["payment"]["entity"]
        notes = entity.get("notes") or {}
        order_id = notes["order_id"]
        payment_ref = entity["id"]
    except (KeyError, TypeError, AttributeError):
        return None
    if not order_id or not payment_ref:
        return None

    amount = entity.get("amount")
    if amount is not None:
        try:
            amount = int(amount) / 100
        except (TypeError, ValueError):
            logger.warning("Webhook payment amount is not a number", amount=amount)
            amount = None

    return {
        "order_id": str(order_id),
        "gateway_payment_ref": str(payment_ref),
        "gateway_order_ref": entity.get("order_id"),
        "amount": amount,
    }


class PaymentWebhookProcessor:
    """Authenticates, parses and applies gateway webhooks."""

    def __init__(self, gateway=None):
        self.gateway = gateway or get_gateway()

    def process(self, raw_body: bytes, signature: str | None) -> dict:
        """Apply one webhook delivery and describe the outcome.

        Raises:
            InvalidSignature: the body was not signed with the shared secret.
            MalformedPayload: the body is not a JSON object.
            RepositoryUnavailable: storage is down; the gateway should retry.
        """
        if not self.gateway.verify_webhook_signature(raw_body, signature):
            logger.warning(
                "Rejected webhook with invalid signature",
                security_event=True,
                body_size=len(raw_body),
                signature_present=bool(signature),
            )
            raise InvalidSignature("Webhook signature verification failed")

        try:
            payload = json.loads(raw_body)
        except (UnicodeDecodeError, ValueError) as exc:
            raise MalformedPayload("Webhook body is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise MalformedPayload("Webhook body is not a JSON object")

        event = payload.get("event")
        if event not in RECONCILED_EVENTS:
            logger.info("Webhook event ignored", webhook_event=event)
            return {"status": IGNORED, "event": event}

        details = _extract_payment(payload)
        if details is None:
            logger.warning("Webhook without a storefront order reference", webhook_event=event)
            return {"status": UNKNOWN_ORDER, "order_id": None}

        try:
            outcome = current_domain.process(
                RecordWebhookPayment(**details),
                asynchronous=False,
            )
        except ObjectNotFoundError:
            logger.warning("Webhook for unknown order", order_id=details["order_id"])
            return {"status": UNKNOWN_ORDER, "order_id": details["order_id"]}
        except OrderNotPayable as exc:
            logger.warning(
                "Webhook payment for order that cannot be paid",
                gateway_payment_ref=details["gateway_payment_ref"],
                **exc.context,
            )
            return {"status": NOT_PAYABLE, "order_id": details["order_id"]}

        return {"status": outcome, "order_id": details["order_id"]}
