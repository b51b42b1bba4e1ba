"""OrderStateMachine — the only way an order's status is changed.

``transition`` reads the order, checks the edge against the transition graph,
applies it, and persists with a conditional write keyed on the status it read.
A concurrent change between the read and the write turns into ``Conflict``
rather than an overwrite.
"""

import structlog
from protean.utils.globals import current_domain

from storefront.exceptions import InvalidTransition
from storefront.order.order import Order
from storefront.order.transitions import (
    OrderStatus,
    TransitionActor,
    assert_transition_allowed,
    is_transition_allowed,
)

logger = structlog.get_logger(__name__)


class OrderStateMachine:
    """Applies status transitions with optimistic concurrency."""

    is_allowed = staticmethod(is_transition_allowed)

    def __init__(self, repository=None):
        self._repository = repository

    @property
    def repository(self):
        return self._repository or current_domain.repository_for(Order)

    def transition(
        self,
        order_id,
        target_status,
        actor,
        reason=None,
        tracking_id=None,
        carrier=None,
        tracking_url=None,
    ) -> Order:
        """Move ``order_id`` to ``target_status`` on behalf of ``actor``.

        Raises:
            InvalidTransition: the edge is not in the graph.
            Conflict: the order changed between read and write.
        """
        target_status = OrderStatus(target_status) if isinstance(target_status, str) else target_status
        actor = TransitionActor(actor) if isinstance(actor, str) else actor

        repo = self.repository
        order = repo.load(order_id)
        observed_status = order.status
        self.apply(order, target_status, actor, reason, tracking_id, carrier, tracking_url)
        repo.compare_and_set(order, expected_status=observed_status)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            from_status=observed_status,
            to_status=target_status.value,
            actor=actor.value,
        )
        return order

    def apply(
        self,
        order,
        target_status,
        actor,
        reason=None,
        tracking_id=None,
        carrier=None,
        tracking_url=None,
    ) -> None:
        """Apply a transition to an already-loaded order without persisting it."""
        assert_transition_allowed(order.status, target_status)

        if target_status == OrderStatus.PROCESSING and order.is_gateway_payment and not order.is_paid:
            # Gateway orders reach processing only through the payment reconciler
            raise InvalidTransition(
                "Gateway orders move to processing only once payment is confirmed",
                current_status=order.status,
                target_status=target_status.value,
            )

        if target_status == OrderStatus.CANCELLED:
            order.cancel(actor, reason=reason)
        elif target_status == OrderStatus.SHIPPED:
            order.ship(actor, tracking_id=tracking_id, carrier=carrier, tracking_url=tracking_url)
        else:
            order.transition_to(target_status, actor, reason=reason)
