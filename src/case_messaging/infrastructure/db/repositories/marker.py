from __future__ import annotations

import uuid
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from case_messaging.domain.entities.message import Marker
from case_messaging.domain.value_objects.enums import MarkerKind
from case_messaging.infrastructure.db.models.message import MessageMarkerModel


class MarkerWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_if_absent(
        self,
        message_id: UUID,
        user_id: int,
        kind: MarkerKind,
        at: datetime,
    ) -> bool:
        stmt = (
            pg_insert(MessageMarkerModel)
            .values(
                id=uuid.uuid4(),
                message_id=message_id,
                user_id=user_id,
                kind=kind.value,
                at=at,
            )
            .on_conflict_do_nothing(constraint="uq_message_marker")
            .returning(MessageMarkerModel.id)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def remove(self, message_id: UUID, user_id: int, kind: MarkerKind) -> bool:
        result = await self._session.execute(
            delete(MessageMarkerModel).where(
                MessageMarkerModel.message_id == message_id,
                MessageMarkerModel.user_id == user_id,
                MessageMarkerModel.kind == kind.value,
            )
        )
        return result.rowcount > 0

    async def list_for(self, message_id: UUID, kind: MarkerKind) -> list[Marker]:
        stmt = (
            select(MessageMarkerModel.user_id, MessageMarkerModel.at)
            .where(
                MessageMarkerModel.message_id == message_id,
                MessageMarkerModel.kind == kind.value,
            )
            .order_by(MessageMarkerModel.at.asc())
        )
        result = await self._session.execute(stmt)
        return [Marker(user_id=row.user_id, at=row.at) for row in result.all()]
