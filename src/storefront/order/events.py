"""Domain events for the Order aggregate.

Events are raised inside the aggregate and dispatched once the unit of work
that produced them commits. Notification handlers consume them; nothing here
is authoritative state.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A customer placed a new order at checkout."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    email = String()
    total = Float(required=True)
    currency = String(required=True)
    payment_method = String(required=True)
    items = Text()  # JSON: list of item dicts
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class GatewaySessionOpened:
    """A payment-gateway order was opened for this order."""

    __version__ = 1

    order_id = Identifier(required=True)
    gateway_order_ref = String(required=True)
    amount = Float(required=True)
    currency = String(required=True)


@storefront.event(part_of="Order")
class PaymentConfirmed:
    """Payment was recorded as paid. Raised exactly once per order."""

    __version__ = 1

    order_id = Identifier(required=True)
    gateway_payment_ref = String(required=True)
    amount = Float()
    confirmed_via = String(required=True)  # client, webhook
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """The order moved along an edge of the status graph."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    email = String()
    from_status = String(required=True)
    to_status = String(required=True)
    actor = String(required=True)
    reason = String(max_length=500)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class TrackingUpdated:
    """Carrier tracking details were recorded on a shipped order."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    email = String()
    carrier = String()
    tracking_id = String(required=True)
    tracking_url = String(max_length=1000, sanitize=False)
    updated_at = DateTime(required=True)
