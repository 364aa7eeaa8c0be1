"""Pydantic schemas for customer photos and the embed upload endpoint."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CustomerPhoto(BaseModel):
    id: str
    agency_id: str
    customer_id: str
    blob_url: str
    name: str
    original_filename: str | None = None
    content_type: str
    file_size: int
    width: int | None = None
    height: int | None = None
    created_at: datetime


class UploadedPhoto(BaseModel):
    id: str
    name: str
    blob_url: str


class UploadCustomer(BaseModel):
    id: str
    name: str
    is_new: bool = Field(..., description="True when the upload created the customer.")


class PhotoUploadResponse(BaseModel):
    success: bool = True
    customer: UploadCustomer
    photos: list[UploadedPhoto]
    notification_sent: bool = False
