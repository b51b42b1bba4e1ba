"""UserNotification aggregate — one entry in a customer's in-app inbox.

Inbox rows are informational. They are written after the transition that
produced them has committed and are never read back to make a decision.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Identifier, String, Text

from storefront.domain import storefront


class NotificationType(Enum):
    ORDER_RECEIVED = "order_received"
    ORDER_PROCESSING = "order_processing"
    ORDER_SHIPPED = "order_shipped"
    ORDER_DELIVERED = "order_delivered"
    ORDER_CANCELLED = "order_cancelled"
    TRACKING_UPDATED = "tracking_updated"
    CANCELLATION_SUBMITTED = "cancellation_submitted"
    REPLACEMENT_SUBMITTED = "replacement_submitted"
    CANCELLATION_APPROVED = "cancellation_approved"
    CANCELLATION_REJECTED = "cancellation_rejected"
    REPLACEMENT_APPROVED = "replacement_approved"
    REPLACEMENT_REJECTED = "replacement_rejected"


@storefront.aggregate
class UserNotification:
    user_id: Identifier(required=True)
    notification_type: String(choices=NotificationType, required=True)
    title: String(required=True, max_length=255)
    message: Text(required=True)
    payload: Text(sanitize=False)  # JSON: order id, status, tracking details
    is_read: Boolean(default=False)
    read_at: DateTime()
    created_at: DateTime()

    @classmethod
    def create(cls, user_id, notification_type, title, message, payload=None):
        return cls(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message,
            payload=payload,
            is_read=False,
            created_at=datetime.now(UTC),
        )

    def mark_read(self):
        if self.is_read:
            return
        self.is_read = True
        self.read_at = datetime.now(UTC)
