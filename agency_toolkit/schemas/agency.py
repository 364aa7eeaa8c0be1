"""Pydantic schemas for agencies (tenants)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

Plan = Literal["free", "toolkit", "pro"]
NotificationMethod = Literal["in_app", "webhook"]


class PhotoUploadSettings(BaseModel):
    """Per-agency switches for the embeddable photo upload form."""

    enabled: bool = Field(True, description="Accept uploads from the embed form.")
    notify_on_upload: bool = Field(True, description="Create a notification per upload session.")
    notification_method: NotificationMethod = Field(
        "in_app",
        description="How the agency is told about uploads.",
    )
    webhook_url: str | None = Field(None, description="Target for webhook notifications.")


class AgencySettings(BaseModel):
    photo_uploads: PhotoUploadSettings = Field(default_factory=PhotoUploadSettings)


class Agency(BaseModel):
    """An agency account; the unit of data isolation."""

    id: str
    name: str
    email: str | None = None
    api_key: str = Field(..., description="Secret used by the dashboard to authenticate.")
    token: str = Field(..., description="Public token embedded in third-party pages.")
    plan: Plan = "free"
    settings: AgencySettings = Field(default_factory=AgencySettings)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
