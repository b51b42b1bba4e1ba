"""Domain events for the CancellationRequest aggregate."""

from protean.fields import DateTime, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="CancellationRequest")
class CancellationRequested:
    """A customer asked to cancel or exchange an order."""

    __version__ = 1

    request_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    email = String()
    request_type = String(required=True)  # cancel, exchange
    reason = Text()
    requested_at = DateTime(required=True)


@storefront.event(part_of="CancellationRequest")
class CancellationDecided:
    """An admin approved or rejected a pending request."""

    __version__ = 1

    request_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    email = String()
    request_type = String(required=True)
    status = String(required=True)  # approved, rejected
    admin_response = Text()
    decided_at = DateTime(required=True)
