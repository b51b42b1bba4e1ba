"""Opening a gateway payment session — command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import GatewayError, OrderAccessDenied, OrderNotPayable
from storefront.gateway import get_gateway
from storefront.order.order import Order, PaymentStatus
from storefront.order.transitions import OrderStatus, is_transition_allowed

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class OpenGatewaySession:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)  # Session user


@storefront.command_handler(part_of=Order)
class OpenGatewaySessionHandler:
    @handle(OpenGatewaySession)
    def open_session(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.load(command.order_id)

        if str(order.customer_id) != str(command.customer_id):
            raise OrderAccessDenied("Order belongs to another customer", order_id=str(order.id))

        payable = (
            order.is_gateway_payment
            and order.payment_status == PaymentStatus.PENDING.value
            and is_transition_allowed(order.status, OrderStatus.PROCESSING)
        )
        if not payable:
            raise OrderNotPayable(
                f"Order {order.id} is not awaiting a gateway payment",
                order_id=str(order.id),
                current_status=order.status,
                payment_status=order.payment_status,
            )

        gateway = get_gateway()
        amount_minor = int(round(order.total * 100))

        # An open gateway order is reused across checkout attempts
        if order.payment.gateway_order_ref:
            return {
                "gateway_order_ref": order.payment.gateway_order_ref,
                "client_key": gateway.key_id,
                "amount": amount_minor,
                "currency": order.currency,
            }

        result = gateway.create_order(
            amount_minor=amount_minor,
            currency=order.currency,
            receipt=str(order.id),
            notes={"order_id": str(order.id), "user_id": str(order.customer_id)},
        )
        if not result.success:
            logger.error(
                "Gateway order creation failed",
                order_id=str(order.id),
                reason=result.failure_reason,
            )
            raise GatewayError(
                result.failure_reason or "Payment gateway refused the order",
                order_id=str(order.id),
            )

        observed_status = order.status
        order.attach_gateway_order(result.gateway_order_ref)
        repo.compare_and_set(
            order,
            expected_status=observed_status,
            expected_payment_status=PaymentStatus.PENDING.value,
        )

        logger.info(
            "Gateway session opened",
            order_id=str(order.id),
            gateway_order_ref=result.gateway_order_ref,
        )
        return {
            "gateway_order_ref": result.gateway_order_ref,
            "client_key": gateway.key_id,
            "amount": amount_minor,
            "currency": order.currency,
        }
