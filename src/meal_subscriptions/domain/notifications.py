"""Notification models."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from meal_subscriptions.domain.results import Message


@dataclass(frozen=True)
class Notification:
    """Stored notification; ``user_id`` is None for admin notifications."""

    id: UUID
    user_id: UUID | None
    title: Message
    description: Message
    mark_as_read: bool
    created_at: datetime


@dataclass(frozen=True)
class NotificationFeed:
    """Recent notifications and the unread count."""

    notifications: list[Notification]
    unread_count: int
