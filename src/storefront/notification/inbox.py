"""Customer inbox — queries plus mark-as-read commands."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.notification.notification import UserNotification


@storefront.repository(part_of=UserNotification)
class UserNotificationRepository:
    def for_user(self, user_id, unread_only: bool = False, limit: int = 50) -> list:
        filters = {"user_id": str(user_id)}
        if unread_only:
            filters["is_read"] = False
        return self._dao.query.filter(**filters).order_by("-created_at").limit(limit).all().items

    def unread_count(self, user_id) -> int:
        return self._dao.query.filter(user_id=str(user_id), is_read=False).all().total


@storefront.command(part_of="UserNotification")
class MarkNotificationRead:
    user_id = Identifier(required=True)
    notification_id = Identifier(required=True)


@storefront.command(part_of="UserNotification")
class MarkAllNotificationsRead:
    user_id = Identifier(required=True)


@storefront.command_handler(part_of=UserNotification)
class InboxCommandHandler:
    @handle(MarkNotificationRead)
    def mark_read(self, command):
        repo = current_domain.repository_for(UserNotification)
        notification = repo.get(command.notification_id)
        # Other users' notifications are reported as missing
        if str(notification.user_id) != str(command.user_id):
            raise ObjectNotFoundError(f"Notification {command.notification_id} does not exist")

        notification.mark_read()
        repo.add(notification)

    @handle(MarkAllNotificationsRead)
    def mark_all_read(self, command):
        repo = current_domain.repository_for(UserNotification)
        unread = repo.for_user(command.user_id, unread_only=True, limit=1000)
        for notification in unread:
            notification.mark_read()
            repo.add(notification)
        return len(unread)
