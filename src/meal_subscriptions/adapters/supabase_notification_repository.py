"""Supabase repository for notifications."""

from dataclasses import asdict, dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from meal_subscriptions.domain.notifications import Notification
from meal_subscriptions.domain.results import Message
from meal_subscriptions.services.notifications import NotificationRepository


@dataclass
class SupabaseNotificationRepository(NotificationRepository):
    """Supabase implementation for notifications.

    Admin notifications are stored with a null ``user_id``.
    """

    client: Client

    def create_notification(self, notification: Notification) -> Notification:
        """Insert a notification row."""
        response = (
            self.client.table("notifications")
            .insert(
                {
                    "id": str(notification.id),
                    "user_id": (
                        str(notification.user_id) if notification.user_id else None
                    ),
                    "title": asdict(notification.title),
                    "description": asdict(notification.description),
                    "mark_as_read": notification.mark_as_read,
                    "created_at": notification.created_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create notification")
        return _parse_notification(response.data[0])

    def list_notifications(
        self, user_id: UUID, include_admin: bool, limit: int
    ) -> list[Notification]:
        """Return notifications newest first."""
        request = _visible_to(
            self.client.table("notifications").select(
                "id, user_id, title, description, mark_as_read, created_at"
            ),
            user_id,
            include_admin,
        )
        response = request.order("created_at", desc=True).limit(limit).execute()
        return [_parse_notification(row) for row in response.data or []]

    def count_unread(self, user_id: UUID, include_admin: bool) -> int:
        """Return the number of unread notifications."""
        request = _visible_to(
            self.client.table("notifications").select("id", count="exact"),
            user_id,
            include_admin,
        )
        response = request.eq("mark_as_read", False).execute()
        return response.count or 0

    def mark_as_read(
        self, notification_id: UUID, user_id: UUID, include_admin: bool
    ) -> bool:
        """Mark one notification as read if the user can see it."""
        request = _visible_to(
            self.client.table("notifications").update({"mark_as_read": True}),
            user_id,
            include_admin,
        )
        response = request.eq("id", str(notification_id)).execute()
        return bool(response.data)

    def mark_all_as_read(self, user_id: UUID, include_admin: bool) -> None:
        """Mark every visible notification as read."""
        request = _visible_to(
            self.client.table("notifications").update({"mark_as_read": True}),
            user_id,
            include_admin,
        )
        request.execute()


def _visible_to(request, user_id: UUID, include_admin: bool):
    if include_admin:
        return request.or_(f"user_id.eq.{user_id},user_id.is.null")
    return request.eq("user_id", str(user_id))


def _parse_notification(row: dict[str, object]) -> Notification:
    user_id = row.get("user_id")
    return Notification(
        id=UUID(str(row["id"])),
        user_id=UUID(str(user_id)) if user_id else None,
        title=Message(**row["title"]),
        description=Message(**row["description"]),
        mark_as_read=bool(row.get("mark_as_read", False)),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
