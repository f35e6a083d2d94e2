from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from case_messaging.domain.entities.trash import TrashEntry
from case_messaging.infrastructure.db.mappers import trash as mapper
from case_messaging.infrastructure.db.models.trash import TrashEntryModel


def _owned_by(stmt: Select, owner_id: int | None) -> Select:
    if owner_id is None:
        return stmt
    return stmt.where(
        or_(TrashEntryModel.deleted_by == owner_id, TrashEntryModel.original_owner == owner_id)
    )


class TrashReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, entry_id: UUID) -> TrashEntry | None:
        model = await self._session.get(TrashEntryModel, entry_id)
        return mapper.model_to_entity(model) if model else None

    async def list_entries(
        self,
        *,
        owner_id: int | None = None,
        item_type: str | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> list[TrashEntry]:
        stmt = _owned_by(select(TrashEntryModel), owner_id)
        if item_type is not None:
            stmt = stmt.where(TrashEntryModel.item_type == item_type)
        stmt = stmt.order_by(TrashEntryModel.deleted_at.desc()).offset(offset).limit(limit)
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count_by_type(
        self,
        *,
        owner_id: int | None = None,
        deleted_after: datetime | None = None,
        deleted_before: datetime | None = None,
    ) -> dict[str, int]:
        stmt = _owned_by(
            select(TrashEntryModel.item_type, func.count()).group_by(TrashEntryModel.item_type),
            owner_id,
        )
        if deleted_after is not None:
            stmt = stmt.where(TrashEntryModel.deleted_at >= deleted_after)
        if deleted_before is not None:
            stmt = stmt.where(TrashEntryModel.deleted_at < deleted_before)
        result = await self._session.execute(stmt)
        return {item_type: count for item_type, count in result.all()}


class TrashWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, entry: TrashEntry) -> TrashEntry:
        self._session.add(mapper.entity_to_model(entry))
        await self._session.flush()
        return entry

    async def delete(self, entry_id: UUID) -> None:
        await self._session.execute(
            delete(TrashEntryModel).where(TrashEntryModel.id == entry_id)
        )

    async def delete_all(self) -> int:
        result = await self._session.execute(delete(TrashEntryModel))
        return result.rowcount

    async def delete_older_than(self, cutoff: datetime) -> int:
        result = await self._session.execute(
            delete(TrashEntryModel).where(TrashEntryModel.deleted_at < cutoff)
        )
        return result.rowcount
