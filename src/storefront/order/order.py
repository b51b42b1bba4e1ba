"""Order aggregate — the authoritative record of an order's status and payment.

Status changes go through ``transition_to``, which consults the transition
graph in ``storefront.order.transitions`` and raises ``OrderStatusChanged``.
Payment and status are fields of the same aggregate, so recording a payment
and moving the order to processing are persisted by one write.

Payment sub-record:
    pending → paid          (exactly once, via the reconciler)
    pending → cancelled     (order cancelled before payment)
    paid → cancelled        (order cancelled after payment; refunds are out of band)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.domain import storefront
from storefront.order.events import (
    GatewaySessionOpened,
    OrderPlaced,
    OrderStatusChanged,
    PaymentConfirmed,
    TrackingUpdated,
)
from storefront.order.transitions import (
    OrderStatus,
    TransitionActor,
    assert_transition_allowed,
    parse_status,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentMethod(Enum):
    GATEWAY = "gateway"
    PAY_ON_DELIVERY = "pay_on_delivery"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class ConfirmationChannel(Enum):
    CLIENT = "client"
    WEBHOOK = "webhook"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Delivery address captured at checkout. Never changes afterwards."""

    full_name = String(required=True, max_length=255)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(max_length=30)


@storefront.value_object(part_of="Order")
class PaymentDetails:
    """Payment sub-record. Replaced as a whole on every change."""

    method = String(choices=PaymentMethod, required=True)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    gateway_order_ref = String(max_length=255)
    gateway_payment_ref = String(max_length=255)
    paid_at = DateTime()
    amount_paid = Float()
    confirmed_via = String(choices=ConfirmationChannel)


@storefront.value_object(part_of="Order")
class TrackingInfo:
    carrier = String(max_length=100)
    tracking_id = String(required=True, max_length=255)
    tracking_url = String(max_length=1000, sanitize=False)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A line item, priced at checkout time."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    email = String(max_length=255)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    total = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="INR")
    payment = ValueObject(PaymentDetails)
    tracking = ValueObject(TrackingInfo)
    open_request_id = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        items_data,
        shipping_address,
        total,
        payment_method,
        email=None,
        currency="INR",
    ):
        """Create a new order in ``pending`` with an unpaid payment record.

        Args:
            customer_id: The user placing the order.
            items_data: List of dicts with product_id, quantity, unit_price.
            shipping_address: Dict matching ShippingAddress.
            total: Order total in major currency units.
            payment_method: ``gateway`` or ``pay_on_delivery``.
        """
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            customer_id=customer_id,
            email=email,
            status=OrderStatus.PENDING.value,
            items=[OrderItem(**item) for item in items_data],
            shipping_address=ShippingAddress(**shipping_address),
            total=total,
            currency=currency,
            payment=PaymentDetails(
                method=payment_method,
                payment_status=PaymentStatus.PENDING.value,
            ),
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                email=email,
                total=total,
                currency=currency,
                payment_method=payment_method,
                items=json.dumps(items_data),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def current_status(self):
        """The status as an OrderStatus, or None when the stored value is unknown."""
        return parse_status(self.status)

    @property
    def payment_status(self):
        return self.payment.payment_status if self.payment else None

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value

    @property
    def is_gateway_payment(self) -> bool:
        return bool(self.payment) and self.payment.method == PaymentMethod.GATEWAY.value

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def transition_to(self, target_status, actor, reason=None):
        """Move the order along one edge of the status graph."""
        current = self.status
        assert_transition_allowed(current, target_status)

        now = datetime.now(UTC)
        self.status = target_status.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                email=self.email,
                from_status=current,
                to_status=target_status.value,
                actor=actor.value,
                reason=reason,
                changed_at=now,
            )
        )

    def attach_gateway_order(self, gateway_order_ref):
        """Remember the gateway order opened for this order."""
        if not self.is_gateway_payment:
            raise ValidationError({"payment": ["Gateway sessions are only opened for gateway payments"]})
        if self.payment_status != PaymentStatus.PENDING.value:
            raise ValidationError({"payment": ["Payment is no longer pending"]})

        self.payment = self._payment_with(gateway_order_ref=gateway_order_ref)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            GatewaySessionOpened(
                order_id=str(self.id),
                gateway_order_ref=gateway_order_ref,
                amount=self.total,
                currency=self.currency,
            )
        )

    def record_payment(self, gateway_payment_ref, confirmed_via, amount=None, paid_at=None):
        """Mark the payment paid and move the order to processing.

        Both changes land on this aggregate and are persisted together.
        """
        if self.payment_status != PaymentStatus.PENDING.value:
            raise ValidationError({"payment": [f"Cannot record payment when payment is {self.payment_status}"]})

        paid_at = paid_at or datetime.now(UTC)
        self.payment = self._payment_with(
            payment_status=PaymentStatus.PAID.value,
            gateway_payment_ref=gateway_payment_ref,
            paid_at=paid_at,
            amount_paid=amount if amount is not None else self.total,
            confirmed_via=confirmed_via.value,
        )
        self.transition_to(OrderStatus.PROCESSING, TransitionActor.SYSTEM)

        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                gateway_payment_ref=gateway_payment_ref,
                amount=self.payment.amount_paid,
                confirmed_via=confirmed_via.value,
                paid_at=paid_at,
            )
        )

    def cancel(self, actor, reason=None):
        """Cancel the order. Allowed from pending and processing only."""
        self.transition_to(OrderStatus.CANCELLED, actor, reason=reason)
        self.payment = self._payment_with(payment_status=PaymentStatus.CANCELLED.value)

    def ship(self, actor, tracking_id=None, carrier=None, tracking_url=None):
        self.transition_to(OrderStatus.SHIPPED, actor)
        if tracking_id:
            # Announced with the shipping notification, not as a separate update
            self._set_tracking(tracking_id, carrier, tracking_url, announce=False)

    def update_tracking(self, tracking_id, carrier=None, tracking_url=None):
        """Record or correct tracking details. Only while shipped."""
        if self.current_status != OrderStatus.SHIPPED:
            raise ValidationError({"tracking": ["Tracking can only be set on shipped orders"]})
        self._set_tracking(tracking_id, carrier, tracking_url)

    # -------------------------------------------------------------------
    # Cancellation request guard
    # -------------------------------------------------------------------
    def claim_request(self, request_id):
        if self.open_request_id:
            raise ValidationError({"open_request_id": ["Order already has an open request"]})
        self.open_request_id = request_id
        self.updated_at = datetime.now(UTC)

    def release_request(self, request_id):
        if str(self.open_request_id) == str(request_id):
            self.open_request_id = None
            self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _payment_with(self, **changes):
        current = {
            "method": self.payment.method,
            "payment_status": self.payment.payment_status,
            "gateway_order_ref": self.payment.gateway_order_ref,
            "gateway_payment_ref": self.payment.gateway_payment_ref,
            "paid_at": self.payment.paid_at,
            "amount_paid": self.payment.amount_paid,
            "confirmed_via": self.payment.confirmed_via,
        }
        current.update(changes)
        return PaymentDetails(**current)

    def _set_tracking(self, tracking_id, carrier, tracking_url, announce=True):
        now = datetime.now(UTC)
        self.tracking = TrackingInfo(
            carrier=carrier,
            tracking_id=tracking_id,
            tracking_url=tracking_url,
        )
        self.updated_at = now
        if not announce:
            return

        self.raise_(
            TrackingUpdated(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                email=self.email,
                carrier=carrier,
                tracking_id=tracking_id,
                tracking_url=tracking_url,
                updated_at=now,
            )
        )
