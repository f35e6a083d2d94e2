from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from case_messaging.domain.entities.notification import Notification
from case_messaging.infrastructure.db.mappers import notification as mapper
from case_messaging.infrastructure.db.models.notification import NotificationModel


class NotificationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, notification_id: UUID) -> Notification | None:
        model = await self._session.get(NotificationModel, notification_id)
        return mapper.model_to_entity(model) if model else None

    async def list_for_user(
        self,
        user_id: int,
        *,
        read: bool | None = None,
        limit: int = 50,
    ) -> list[Notification]:
        stmt = (
            select(NotificationModel)
            .where(NotificationModel.recipient_id == user_id)
            .order_by(NotificationModel.read.asc(), NotificationModel.created_at.desc())
            .limit(limit)
        )
        if read is not None:
            stmt = stmt.where(NotificationModel.read.is_(read))
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count_unread(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(NotificationModel).where(
            NotificationModel.recipient_id == user_id,
            NotificationModel.read.is_(False),
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def exists(
        self,
        recipient_id: int,
        dedupe_key: str,
        *,
        since: datetime | None = None,
    ) -> bool:
        stmt = (
            select(NotificationModel.id)
            .where(
                NotificationModel.recipient_id == recipient_id,
                NotificationModel.dedupe_key == dedupe_key,
            )
            .limit(1)
        )
        if since is not None:
            stmt = stmt.where(NotificationModel.created_at >= since)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None


class NotificationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, notification: Notification) -> Notification:
        self._session.add(mapper.entity_to_model(notification))
        await self._session.flush()
        return notification

    async def mark_read(self, notification_id: UUID) -> None:
        await self._session.execute(
            update(NotificationModel)
            .where(NotificationModel.id == notification_id)
            .values(read=True)
        )

    async def mark_all_read(self, user_id: int) -> int:
        result = await self._session.execute(
            update(NotificationModel)
            .where(
                NotificationModel.recipient_id == user_id,
                NotificationModel.read.is_(False),
            )
            .values(read=True)
        )
        return result.rowcount

    async def delete(self, notification_id: UUID) -> None:
        await self._session.execute(
            delete(NotificationModel).where(NotificationModel.id == notification_id)
        )
