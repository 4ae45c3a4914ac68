"""Notification service."""

import logging
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from meal_subscriptions.adapters.push_client import PushClient
from meal_subscriptions.domain.notifications import Notification, NotificationFeed
from meal_subscriptions.domain.results import (
    ErrorKind,
    Failure,
    Message,
    Ok,
    Result,
    system_failure,
)

_logger = logging.getLogger(__name__)

ADMIN_ROOM = "admins"
NEW_NOTIFICATION_EVENT = "newNotification"

NOTIFICATION_NOT_FOUND = Message(
    en="Notification not found.", ar="الإشعار غير موجود"
)
NOTIFICATION_MARKED_READ = Message(
    en="Notification marked as read.", ar="تم وضع علامة مقروء على الإشعار"
)
ALL_NOTIFICATIONS_MARKED_READ = Message(
    en="All notifications marked as read.",
    ar="تم وضع علامة مقروء على جميع الإشعارات",
)


class NotificationRepository(Protocol):
    """Persistence interface for notifications."""

    def create_notification(self, notification: Notification) -> Notification:
        """Persist a notification and return it."""

    def list_notifications(
        self, user_id: UUID, include_admin: bool, limit: int
    ) -> list[Notification]:
        """Return a user's notifications, newest first."""

    def count_unread(self, user_id: UUID, include_admin: bool) -> int:
        """Return the number of unread notifications."""

    def mark_as_read(
        self, notification_id: UUID, user_id: UUID, include_admin: bool
    ) -> bool:
        """Mark one visible notification as read; false when none matched."""

    def mark_all_as_read(self, user_id: UUID, include_admin: bool) -> None:
        """Mark every notification visible to the user as read."""


@dataclass
class NotificationService:
    """Stores notifications and fans them out to connected clients."""

    repository: NotificationRepository
    push_client: PushClient | None = None
    limit: int = 20

    async def notify_user(
        self, user_id: UUID, title: Message, description: Message
    ) -> None:
        """Notify a customer. Never raises."""
        await self._notify(user_id, f"customer:{user_id}", title, description)

    async def notify_admins(self, title: Message, description: Message) -> None:
        """Notify every admin. Never raises."""
        await self._notify(None, ADMIN_ROOM, title, description)

    def list_for_user(
        self, user_id: UUID, is_admin: bool = False
    ) -> Result[NotificationFeed]:
        """Return recent notifications with the unread count."""
        try:
            notifications = self.repository.list_notifications(
                user_id, include_admin=is_admin, limit=self.limit
            )
            unread = self.repository.count_unread(user_id, include_admin=is_admin)
        except Exception:
            _logger.exception(
                "Failed to list notifications", extra={"user_id": str(user_id)}
            )
            return system_failure()
        return Ok(NotificationFeed(notifications=notifications, unread_count=unread))

    def mark_as_read(
        self, notification_id: UUID, user_id: UUID, is_admin: bool = False
    ) -> Result[None]:
        """Mark a single notification addressed to the user as read."""
        try:
            found = self.repository.mark_as_read(
                notification_id, user_id, include_admin=is_admin
            )
        except Exception:
            _logger.exception(
                "Failed to mark notification as read",
                extra={"notification_id": str(notification_id)},
            )
            return system_failure()
        if not found:
            return Failure(ErrorKind.NOT_FOUND, NOTIFICATION_NOT_FOUND)
        return Ok(None, NOTIFICATION_MARKED_READ)

    def mark_all_as_read(self, user_id: UUID, is_admin: bool = False) -> Result[None]:
        """Mark every notification visible to the user as read."""
        try:
            self.repository.mark_all_as_read(user_id, include_admin=is_admin)
        except Exception:
            _logger.exception(
                "Failed to mark notifications as read",
                extra={"user_id": str(user_id)},
            )
            return system_failure()
        return Ok(None, ALL_NOTIFICATIONS_MARKED_READ)

    async def _notify(
        self,
        user_id: UUID | None,
        room: str,
        title: Message,
        description: Message,
    ) -> None:
        notification = Notification(
            id=uuid4(),
            user_id=user_id,
            title=title,
            description=description,
            mark_as_read=False,
            created_at=datetime.now(tz=UTC),
        )
        try:
            stored = self.repository.create_notification(notification)
        except Exception:
            _logger.exception("Failed to store notification", extra={"room": room})
            return
        if self.push_client is None:
            return
        try:
            await self.push_client.publish(
                room,
                NEW_NOTIFICATION_EVENT,
                {
                    "id": str(stored.id),
                    "title": asdict(stored.title),
                    "description": asdict(stored.description),
                    "created_at": stored.created_at.isoformat(),
                },
            )
        except Exception:
            _logger.exception("Failed to publish notification", extra={"room": room})
