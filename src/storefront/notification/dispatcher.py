"""NotificationDispatcher — best-effort delivery of user notifications.

``emit`` writes one inbox row and, when an address is known, sends one email.
Nothing here is retried and no error escapes: a lost notification must never
undo or fail the order change that caused it.
"""

import json
from dataclasses import dataclass, field

import structlog
from protean.utils.globals import current_domain

from storefront.channel import EMAIL, get_channel
from storefront.notification.notification import NotificationType, UserNotification
from storefront.notification.templates import render

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NotificationEvent:
    user_id: str
    notification_type: NotificationType
    payload: dict = field(default_factory=dict)
    email: str | None = None


class NotificationDispatcher:
    def __init__(self, email_channel=None):
        self._email_channel = email_channel

    @property
    def email_channel(self):
        return self._email_channel or get_channel(EMAIL)

    def emit(self, event: NotificationEvent) -> bool:
        """Deliver ``event`` once. Returns True when the inbox row was stored."""
        log = logger.bind(
            user_id=event.user_id,
            notification_type=event.notification_type.value,
            order_id=event.payload.get("order_id"),
        )

        try:
            title, message = render(event.notification_type, event.payload)
        except Exception:
            log.exception("Notification could not be rendered")
            return False

        stored = False
        try:
            notification = UserNotification.create(
                user_id=event.user_id,
                notification_type=event.notification_type.value,
                title=title,
                message=message,
                payload=json.dumps(event.payload, default=str),
            )
            current_domain.repository_for(UserNotification).add(notification)
            stored = True
        except Exception:
            log.exception("Inbox notification could not be stored")

        if event.email:
            try:
                result = self.email_channel.send(to=event.email, subject=title, body=message)
                if result.get("status") != "sent":
                    log.warning("Notification email not sent", error=result.get("error"))
            except Exception:
                log.exception("Notification email failed")

        log.info("Notification emitted", stored=stored)
        return stored
