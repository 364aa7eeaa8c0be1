"""Pydantic schemas for customer sub-accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class Customer(BaseModel):
    """A customer sub-account owned by one agency."""

    id: str
    agency_id: str
    name: str
    token: str
    owner_name: str | None = None
    ghl_location_id: str | None = Field(
        None,
        description="Location id of the customer's sub-account in the CRM.",
    )
    gbp_place_id: str | None = Field(None, description="Google Business Profile place id.")
    is_active: bool = True
    photo_count: int = 0
    settings: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class CustomerCreate(BaseModel):
    name: str = Field(..., description="Display name; must not be blank.")
    ghl_location_id: str | None = None
    gbp_place_id: str | None = None


class CustomerUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    name: str | None = None
    ghl_location_id: str | None = None
    gbp_place_id: str | None = None
    is_active: bool | None = None
    settings: dict[str, Any] | None = None


class DeleteResponse(BaseModel):
    success: bool = True
