from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from agency_toolkit.adapters.storage.base import AbstractNotificationStore
from agency_toolkit.core.auth import get_current_agency
from agency_toolkit.core.stores import get_notification_store
from agency_toolkit.schemas.agency import Agency
from agency_toolkit.schemas.customer import DeleteResponse
from agency_toolkit.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    NotificationUpdate,
)
from agency_toolkit.services.notification_service import NotificationService

router = APIRouter(tags=["Notifications"])


def get_notification_service(
    store: Annotated[AbstractNotificationStore, Depends(get_notification_store)],
) -> NotificationService:
    return NotificationService(store)


CurrentAgency = Annotated[Agency, Depends(get_current_agency)]
Service = Annotated[NotificationService, Depends(get_notification_service)]


@router.get("/notifications", response_model=NotificationListResponse)
async def list_notifications(
    agency: CurrentAgency,
    service: Service,
    unread_only: bool = Query(False, description="Only return unread notifications."),
    limit: int | None = Query(None, description="Page size (default 20, max 100)."),
) -> NotificationListResponse:
    """List notifications newest first, with the total unread count."""
    return service.list(agency, limit=limit, unread_only=unread_only)


# Declared before /notifications/{notification_id} so the literal path wins.
@router.post("/notifications/mark-all-read", response_model=MarkAllReadResponse)
async def mark_all_read(agency: CurrentAgency, service: Service) -> MarkAllReadResponse:
    return MarkAllReadResponse(updated=service.mark_all_read(agency))


@router.patch("/notifications/{notification_id}", response_model=NotificationResponse)
async def update_notification(
    notification_id: str,
    payload: NotificationUpdate,
    agency: CurrentAgency,
    service: Service,
) -> NotificationResponse:
    return NotificationResponse(notification=service.update(agency, notification_id, payload))


@router.delete("/notifications/{notification_id}", response_model=DeleteResponse)
async def delete_notification(notification_id: str, agency: CurrentAgency, service: Service) -> DeleteResponse:
    service.delete(agency, notification_id)
    return DeleteResponse()
