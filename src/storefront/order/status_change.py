"""Admin-driven status changes — command and handler.

All changes go through OrderStateMachine, so an admin can never move an order
along an edge the graph does not have, and a concurrent change is reported as
a conflict instead of being overwritten.
"""

from protean import handle
from protean.fields import Identifier, String

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.state_machine import OrderStateMachine
from storefront.order.transitions import OrderStatus, TransitionActor


@storefront.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    actor = String(choices=TransitionActor, default=TransitionActor.ADMIN.value)
    reason = String(max_length=500)
    carrier = String(max_length=100)
    tracking_id = String(max_length=255)
    tracking_url = String(max_length=1000, sanitize=False)


@storefront.command_handler(part_of=Order)
class ChangeOrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_status(self, command):
        order = OrderStateMachine().transition(
            command.order_id,
            OrderStatus(command.status),
            TransitionActor(command.actor),
            reason=command.reason,
            tracking_id=command.tracking_id,
            carrier=command.carrier,
            tracking_url=command.tracking_url,
        )
        return order.status
