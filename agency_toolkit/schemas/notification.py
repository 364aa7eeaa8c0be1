"""Pydantic schemas for in-app notifications."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class Notification(BaseModel):
    id: str
    agency_id: str
    type: str = Field(..., description="Event type, e.g. 'photo_upload'.")
    title: str
    message: str
    link: str | None = None
    read: bool = False
    created_at: datetime


class NotificationView(Notification):
    time_ago: str = Field(..., description="Creation time relative to now, e.g. '5 minutes ago'.")


class NotificationListResponse(BaseModel):
    notifications: list[NotificationView]
    unread_count: int


class NotificationUpdate(BaseModel):
    read: bool | None = None


class NotificationResponse(BaseModel):
    notification: NotificationView


class MarkAllReadResponse(BaseModel):
    success: bool = True
    updated: int
