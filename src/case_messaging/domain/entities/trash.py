from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from case_messaging.domain.value_objects.enums import TrashItemType


@dataclass(frozen=True, slots=True)
class TrashEntry:
    id: UUID
    item_type: TrashItemType
    original_id: str
    snapshot: dict[str, Any]
    deleted_by: int
    original_owner: int | None
    deleted_at: datetime
    origin: str = "unknown"
    metadata: dict[str, Any] = field(default_factory=dict)
