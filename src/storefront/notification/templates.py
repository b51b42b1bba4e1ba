"""Inbox and email wording per notification type."""

from storefront.notification.notification import NotificationType

_TEMPLATES: dict[NotificationType, tuple[str, str]] = {
    NotificationType.ORDER_RECEIVED: (
        "Order received",
        "We have received your order #{short_id}. We'll let you know when it is being prepared.",
    ),
    NotificationType.ORDER_PROCESSING: (
        "Order confirmed",
        "Your order #{short_id} is confirmed and being prepared for dispatch.",
    ),
    NotificationType.ORDER_SHIPPED: (
        "Order shipped",
        "Your order #{short_id} has shipped.{tracking_line}",
    ),
    NotificationType.ORDER_DELIVERED: (
        "Order delivered",
        "Your order #{short_id} has been delivered. Enjoy!",
    ),
    NotificationType.ORDER_CANCELLED: (
        "Order cancelled",
        "Your order #{short_id} has been cancelled.{reason_line}",
    ),
    NotificationType.TRACKING_UPDATED: (
        "Tracking updated",
        "Tracking details for your order #{short_id} were updated.{tracking_line}",
    ),
    NotificationType.CANCELLATION_SUBMITTED: (
        "Cancellation requested",
        "We received your cancellation request for order #{short_id}.",
    ),
    NotificationType.REPLACEMENT_SUBMITTED: (
        "Exchange requested",
        "We received your exchange request for order #{short_id}.",
    ),
    NotificationType.CANCELLATION_APPROVED: (
        "Cancellation approved",
        "Your cancellation request for order #{short_id} was approved.{response_line}",
    ),
    NotificationType.CANCELLATION_REJECTED: (
        "Cancellation rejected",
        "Your cancellation request for order #{short_id} was rejected.{response_line}",
    ),
    NotificationType.REPLACEMENT_APPROVED: (
        "Exchange approved",
        "Your exchange request for order #{short_id} was approved.{response_line}",
    ),
    NotificationType.REPLACEMENT_REJECTED: (
        "Exchange rejected",
        "Your exchange request for order #{short_id} was rejected.{response_line}",
    ),
}


def render(notification_type: NotificationType, payload: dict) -> tuple[str, str]:
    """Return ``(title, message)`` for a notification."""
    title, message = _TEMPLATES[notification_type]

    order_id = str(payload.get("order_id", ""))
    tracking_id = payload.get("tracking_id")
    tracking_line = ""
    if tracking_id:
        carrier = payload.get("carrier") or "the carrier"
        tracking_line = f" Tracking number {tracking_id} with {carrier}."
    reason = payload.get("reason")
    response = payload.get("admin_response")

    return title, message.format(
        short_id=order_id[:8].upper(),
        tracking_line=tracking_line,
        reason_line=f" Reason: {reason}" if reason else "",
        response_line=f" Note from our team: {response}" if response else "",
    )
