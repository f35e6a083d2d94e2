from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from case_messaging.api.deps import CurrentPrincipal, RetentionDaysDep, UoWDep
from case_messaging.api.v1.schemas.trash import (
    EmptyTrashResponse,
    RestoreResponse,
    TrashEntryResponse,
    TrashStatsResponse,
)
from case_messaging.domain.value_objects.enums import TrashItemType
from case_messaging.services import trash_service

router = APIRouter(prefix="/api/v1/trash", tags=["trash"])


@router.get("", response_model=list[TrashEntryResponse])
async def list_trash(
    principal: CurrentPrincipal,
    uow: UoWDep,
    item_type: TrashItemType | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
) -> list[TrashEntryResponse]:
    entries = await trash_service.list_trash(
        principal, uow, item_type=item_type, page=page, limit=limit,
    )
    return [TrashEntryResponse.model_validate(e) for e in entries]


@router.get("/stats", response_model=TrashStatsResponse)
async def trash_stats(
    principal: CurrentPrincipal,
    uow: UoWDep,
    retention_days: RetentionDaysDep,
) -> TrashStatsResponse:
    stats = await trash_service.trash_stats(principal, uow, retention_days=retention_days)
    return TrashStatsResponse.model_validate(stats)


@router.post("/empty", response_model=EmptyTrashResponse)
async def empty_trash(principal: CurrentPrincipal, uow: UoWDep) -> EmptyTrashResponse:
    return EmptyTrashResponse(removed=await trash_service.empty_trash(principal, uow))


@router.post("/{entry_id}/restore", response_model=RestoreResponse)
async def restore(entry_id: UUID, principal: CurrentPrincipal, uow: UoWDep) -> RestoreResponse:
    entry = await trash_service.restore(entry_id, principal, uow)
    return RestoreResponse(item_type=entry.item_type, original_id=entry.original_id)


@router.delete("/{entry_id}", status_code=204)
async def purge(entry_id: UUID, principal: CurrentPrincipal, uow: UoWDep) -> None:
    await trash_service.purge(entry_id, principal, uow)
