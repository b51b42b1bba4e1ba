"""Order placement — command and handler."""

import json

from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront import config
from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    email = String(max_length=255)
    items = Text(required=True)  # JSON: list of {product_id, quantity, unit_price}
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(required=True, max_length=50)
    total = Float()  # Defaults to the sum of the line items
    currency = String(max_length=3)


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else command.items
        shipping_address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )
        total = command.total
        if total is None:
            total = round(sum(item["quantity"] * item["unit_price"] for item in items), 2)

        order = Order.place(
            customer_id=command.customer_id,
            email=command.email,
            items_data=items,
            shipping_address=shipping_address,
            total=total,
            payment_method=command.payment_method,
            currency=command.currency or config.store_currency(),
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
