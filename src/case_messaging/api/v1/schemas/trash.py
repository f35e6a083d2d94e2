from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from case_messaging.domain.value_objects.enums import TrashItemType


class TrashEntryResponse(BaseModel):
    id: UUID
    item_type: TrashItemType
    original_id: str
    deleted_by: int
    original_owner: int | None
    origin: str
    metadata: dict[str, Any]
    snapshot: dict[str, Any]
    deleted_at: datetime

    model_config = {"from_attributes": True}


class TrashStatsResponse(BaseModel):
    total: int
    by_type: dict[str, int]
    expiring_soon: int

    model_config = {"from_attributes": True}


class RestoreResponse(BaseModel):
    item_type: TrashItemType
    original_id: str


class EmptyTrashResponse(BaseModel):
    removed: int
