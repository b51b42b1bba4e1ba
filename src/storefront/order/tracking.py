"""Tracking updates on shipped orders — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.transitions import OrderStatus


@storefront.command(part_of="Order")
class UpdateTracking:
    order_id = Identifier(required=True)
    tracking_id = String(required=True, max_length=255)
    carrier = String(max_length=100)
    tracking_url = String(max_length=1000, sanitize=False)


@storefront.command_handler(part_of=Order)
class UpdateTrackingHandler:
    @handle(UpdateTracking)
    def update_tracking(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.load(command.order_id)
        order.update_tracking(
            tracking_id=command.tracking_id,
            carrier=command.carrier,
            tracking_url=command.tracking_url,
        )
        repo.compare_and_set(order, expected_status=OrderStatus.SHIPPED.value)
