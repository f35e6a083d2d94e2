from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from case_messaging.api.deps import CurrentPrincipal, UoWDep
from case_messaging.api.v1.schemas.message import UnreadCountResponse
from case_messaging.api.v1.schemas.notification import MarkAllReadResponse, NotificationResponse
from case_messaging.services import notification_service

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    principal: CurrentPrincipal,
    uow: UoWDep,
    read: bool | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
) -> list[NotificationResponse]:
    items = await notification_service.list_notifications(principal, read, limit, uow)
    return [NotificationResponse.model_validate(n) for n in items]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(principal: CurrentPrincipal, uow: UoWDep) -> UnreadCountResponse:
    return UnreadCountResponse(count=await notification_service.count_unread(principal, uow))


@router.put("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(principal: CurrentPrincipal, uow: UoWDep) -> MarkAllReadResponse:
    return MarkAllReadResponse(updated=await notification_service.mark_all_read(principal, uow))


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> NotificationResponse:
    notification = await notification_service.mark_read(notification_id, principal, uow)
    return NotificationResponse.model_validate(notification)


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> None:
    await notification_service.delete_notification(notification_id, principal, uow)
