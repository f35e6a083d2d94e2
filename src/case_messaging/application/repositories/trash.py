from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from case_messaging.domain.entities.trash import TrashEntry


class TrashReader(Protocol):
    async def get_by_id(self, entry_id: UUID) -> TrashEntry | None: ...

    async def list_entries(
        self,
        *,
        owner_id: int | None = None,
        item_type: str | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> list[TrashEntry]:
        """Newest first. ``owner_id`` restricts to entries deleted or owned by that user."""
        ...

    async def count_by_type(
        self,
        *,
        owner_id: int | None = None,
        deleted_after: datetime | None = None,
        deleted_before: datetime | None = None,
    ) -> dict[str, int]: ...


class TrashWriter(Protocol):
    async def add(self, entry: TrashEntry) -> TrashEntry:
        """Persist and flush the snapshot so later steps run against a confirmed write."""
        ...

    async def delete(self, entry_id: UUID) -> None: ...

    async def delete_all(self) -> int: ...

    async def delete_older_than(self, cutoff: datetime) -> int: ...
