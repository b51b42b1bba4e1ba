"""Client-side payment confirmation — command and handler.

Called by the browser after the gateway checkout succeeds. The caller is
trusted through its session; the gateway's checkout signature is not checked
here, the webhook being the authenticated path.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import GatewayReferenceMismatch, OrderAccessDenied
from storefront.order.order import ConfirmationChannel, Order
from storefront.payment.reconciler import reconcile_payment


@storefront.command(part_of="Order")
class ConfirmClientPayment:
    order_id = Identifier(required=True)
    gateway_payment_ref = String(required=True, max_length=255)
    gateway_order_ref = String(max_length=255)
    customer_id = Identifier(required=True)  # Session user


@storefront.command_handler(part_of=Order)
class ConfirmClientPaymentHandler:
    @handle(ConfirmClientPayment)
    def confirm_payment(self, command):
        order = current_domain.repository_for(Order).load(command.order_id)

        if str(order.customer_id) != str(command.customer_id):
            raise OrderAccessDenied(
                "Order belongs to another customer",
                order_id=str(order.id),
            )

        stored_ref = order.payment.gateway_order_ref if order.payment else None
        if command.gateway_order_ref and stored_ref and command.gateway_order_ref != stored_ref:
            raise GatewayReferenceMismatch(
                "Gateway order reference does not match this order",
                order_id=str(order.id),
            )

        return reconcile_payment(
            order.id,
            command.gateway_payment_ref,
            ConfirmationChannel.CLIENT,
            order=order,
        )
