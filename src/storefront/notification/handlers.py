"""Event handlers that turn order and request events into notifications.

They run after the unit of work that raised the event has committed.
"""

import structlog
from protean import handle
from protean.utils.globals import current_domain

from storefront.cancellation.events import CancellationDecided, CancellationRequested
from storefront.domain import storefront
from storefront.notification.dispatcher import NotificationDispatcher, NotificationEvent
from storefront.notification.notification import NotificationType, UserNotification
from storefront.order.events import OrderPlaced, OrderStatusChanged, TrackingUpdated
from storefront.order.order import Order
from storefront.order.transitions import OrderStatus

logger = structlog.get_logger(__name__)

_STATUS_NOTIFICATIONS = {
    OrderStatus.PROCESSING.value: NotificationType.ORDER_PROCESSING,
    OrderStatus.SHIPPED.value: NotificationType.ORDER_SHIPPED,
    OrderStatus.DELIVERED.value: NotificationType.ORDER_DELIVERED,
    OrderStatus.CANCELLED.value: NotificationType.ORDER_CANCELLED,
}

_REQUEST_SUBMITTED = {
    "cancel": NotificationType.CANCELLATION_SUBMITTED,
    "exchange": NotificationType.REPLACEMENT_SUBMITTED,
}

_REQUEST_DECIDED = {
    ("cancel", "approved"): NotificationType.CANCELLATION_APPROVED,
    ("cancel", "rejected"): NotificationType.CANCELLATION_REJECTED,
    ("exchange", "approved"): NotificationType.REPLACEMENT_APPROVED,
    ("exchange", "rejected"): NotificationType.REPLACEMENT_REJECTED,
}


def _tracking_for(order_id) -> dict:
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except Exception:
        logger.warning("Order not readable for tracking details", order_id=str(order_id))
        return {}
    if not order.tracking:
        return {}
    return {
        "carrier": order.tracking.carrier,
        "tracking_id": order.tracking.tracking_id,
        "tracking_url": order.tracking.tracking_url,
    }


@storefront.event_handler(part_of=UserNotification, stream_category="storefront::order")
class OrderNotificationHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        NotificationDispatcher().emit(
            NotificationEvent(
                user_id=str(event.customer_id),
                notification_type=NotificationType.ORDER_RECEIVED,
                email=event.email,
                payload={"order_id": str(event.order_id), "total": event.total, "currency": event.currency},
            )
        )

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        notification_type = _STATUS_NOTIFICATIONS.get(event.to_status)
        if notification_type is None:
            return

        payload = {
            "order_id": str(event.order_id),
            "status": event.to_status,
            "previous_status": event.from_status,
            "actor": event.actor,
        }
        if event.reason:
            payload["reason"] = event.reason
        if notification_type == NotificationType.ORDER_SHIPPED:
            payload.update(_tracking_for(event.order_id))

        NotificationDispatcher().emit(
            NotificationEvent(
                user_id=str(event.customer_id),
                notification_type=notification_type,
                email=event.email,
                payload=payload,
            )
        )

    @handle(TrackingUpdated)
    def on_tracking_updated(self, event: TrackingUpdated) -> None:
        NotificationDispatcher().emit(
            NotificationEvent(
                user_id=str(event.customer_id),
                notification_type=NotificationType.TRACKING_UPDATED,
                email=event.email,
                payload={
                    "order_id": str(event.order_id),
                    "carrier": event.carrier,
                    "tracking_id": event.tracking_id,
                    "tracking_url": event.tracking_url,
                },
            )
        )


@storefront.event_handler(part_of=UserNotification, stream_category="storefront::cancellation_request")
class CancellationNotificationHandler:
    @handle(CancellationRequested)
    def on_requested(self, event: CancellationRequested) -> None:
        NotificationDispatcher().emit(
            NotificationEvent(
                user_id=str(event.customer_id),
                notification_type=_REQUEST_SUBMITTED[event.request_type],
                email=event.email,
                payload={
                    "order_id": str(event.order_id),
                    "request_id": str(event.request_id),
                    "reason": event.reason,
                },
            )
        )

    @handle(CancellationDecided)
    def on_decided(self, event: CancellationDecided) -> None:
        NotificationDispatcher().emit(
            NotificationEvent(
                user_id=str(event.customer_id),
                notification_type=_REQUEST_DECIDED[(event.request_type, event.status)],
                email=event.email,
                payload={
                    "order_id": str(event.order_id),
                    "request_id": str(event.request_id),
                    "status": event.status,
                    "admin_response": event.admin_response,
                },
            )
        )
