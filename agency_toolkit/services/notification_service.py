"""In-app notifications for agencies."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from agency_toolkit.adapters.storage.base import AbstractNotificationStore
from agency_toolkit.core.config import settings
from agency_toolkit.core.errors import NotFoundAppError
from agency_toolkit.schemas.agency import Agency
from agency_toolkit.schemas.notification import (
    Notification,
    NotificationListResponse,
    NotificationUpdate,
    NotificationView,
)
from agency_toolkit.utils.time_format import format_time_ago

logger = logging.getLogger(__name__)


def to_view(notification: Notification, now: datetime | None = None) -> NotificationView:
    return NotificationView(
        **notification.model_dump(),
        time_ago=format_time_ago(notification.created_at, now),
    )


def clamp_limit(limit: int | None) -> int:
    """Default and cap the list size; non-positive values fall back to the default."""
    if limit is None or limit < 1:
        return settings.app.notifications_default_limit
    return min(limit, settings.app.notifications_max_limit)


class NotificationService:
    def __init__(self, notifications: AbstractNotificationStore) -> None:
        self.notifications = notifications

    def list(
        self,
        agency: Agency,
        *,
        limit: int | None = None,
        unread_only: bool = False,
    ) -> NotificationListResponse:
        now = datetime.now(timezone.utc)
        rows = self.notifications.list_for_agency(
            agency.id, limit=clamp_limit(limit), unread_only=unread_only
        )
        return NotificationListResponse(
            notifications=[to_view(n, now) for n in rows],
            unread_count=self.notifications.unread_count(agency.id),
        )

    def update(self, agency: Agency, notification_id: str, payload: NotificationUpdate) -> NotificationView:
        if self.notifications.get(agency.id, notification_id) is None:
            raise NotFoundAppError(code="notification_not_found", message="Notification not found")

        changes = {"read": payload.read} if payload.read is not None else {}
        updated = self.notifications.update(agency.id, notification_id, changes)
        if updated is None:
            raise NotFoundAppError(code="notification_not_found", message="Notification not found")
        return to_view(updated)

    def delete(self, agency: Agency, notification_id: str) -> None:
        # Deleting a missing notification is not an error for the caller.
        removed = self.notifications.delete(agency.id, notification_id)
        logger.info(
            "notifications.deleted",
            extra={"agency_id": agency.id, "notification_id": notification_id, "removed": removed},
        )

    def mark_all_read(self, agency: Agency) -> int:
        updated = self.notifications.mark_all_read(agency.id)
        logger.info("notifications.marked_all_read", extra={"agency_id": agency.id, "updated": updated})
        return updated

    def notify(
        self,
        agency: Agency,
        *,
        type: str,
        title: str,
        message: str,
        link: str | None = None,
    ) -> Notification:
        notification = self.notifications.insert(
            agency.id,
            {"type": type, "title": title, "message": message, "link": link, "read": False},
        )
        logger.info(
            "notifications.created",
            extra={"agency_id": agency.id, "notification_type": type, "notification_id": notification.id},
        )
        return notification
