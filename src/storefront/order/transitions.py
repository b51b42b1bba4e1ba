"""Order status vocabulary and the allowed-transition graph.

This table is the single place where status pairs are judged. Other modules
ask ``is_transition_allowed`` / ``assert_transition_allowed`` instead of
comparing status strings themselves.

Graph:
    pending → processing → shipped → delivered
    pending → cancelled
    processing → cancelled
    delivered, cancelled: terminal
"""

from enum import Enum

import structlog

from storefront.exceptions import InvalidTransition

logger = structlog.get_logger(__name__)


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class TransitionActor(Enum):
    SYSTEM = "system"
    ADMIN = "admin"
    CUSTOMER = "customer"


ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    # Cancelling after dispatch is never allowed
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def parse_status(value):
    """Return the OrderStatus for a stored value, or None if it is unknown.

    Unknown values can appear when a newer deployment writes a status this
    version does not know about. They are logged and treated as having no
    outgoing edges.
    """
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        logger.warning("Unknown order status encountered", status=value)
        return None


def is_terminal(status) -> bool:
    current = parse_status(status)
    return current is None or not ALLOWED_TRANSITIONS[current]


def is_transition_allowed(current, target) -> bool:
    current_status = parse_status(current)
    target_status = parse_status(target)
    if current_status is None or target_status is None:
        return False
    return target_status in ALLOWED_TRANSITIONS[current_status]


def assert_transition_allowed(current, target) -> None:
    if not is_transition_allowed(current, target):
        current_value = current.value if isinstance(current, OrderStatus) else current
        target_value = target.value if isinstance(target, OrderStatus) else target
        raise InvalidTransition(
            f"Cannot transition order from {current_value} to {target_value}",
            current_status=current_value,
            target_status=target_value,
        )
