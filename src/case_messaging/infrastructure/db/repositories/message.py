from __future__ import annotations

from typing import assert_never
from uuid import UUID

from sqlalchemy import and_, delete, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from case_messaging.domain.entities.message import Message
from case_messaging.domain.value_objects.enums import InboxFilter, MarkerKind
from case_messaging.infrastructure.db.mappers import message as mapper
from case_messaging.infrastructure.db.models.message import MessageMarkerModel, MessageModel


def _addressed_to(user_id: int) -> ColumnElement[bool]:
    return or_(
        MessageModel.recipient_ids.contains([user_id]),
        MessageModel.copy_ids.contains([user_id]),
    )


def _involves(user_id: int) -> ColumnElement[bool]:
    return or_(MessageModel.sender_id == user_id, _addressed_to(user_id))


def _has_marker(user_id: int, kind: MarkerKind) -> ColumnElement[bool]:
    return exists().where(
        MessageMarkerModel.message_id == MessageModel.id,
        MessageMarkerModel.user_id == user_id,
        MessageMarkerModel.kind == kind.value,
    )


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: UUID) -> Message | None:
        stmt = (
            select(MessageModel)
            .where(MessageModel.id == message_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_by_ids(self, message_ids: list[UUID]) -> list[Message]:
        if not message_ids:
            return []
        stmt = (
            select(MessageModel)
            .where(MessageModel.id.in_(message_ids))
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_for_user(
        self,
        user_id: int,
        inbox_filter: InboxFilter,
        *,
        case_ref: str | None = None,
        sender_id: int | None = None,
        addressee_id: int | None = None,
        limit: int = 1000,
    ) -> list[Message]:
        match inbox_filter:
            case InboxFilter.ALL:
                selector = _involves(user_id)
            case InboxFilter.SENT:
                selector = MessageModel.sender_id == user_id
            case InboxFilter.RECEIVED:
                selector = _addressed_to(user_id)
            case InboxFilter.UNREAD:
                selector = and_(_addressed_to(user_id), ~_has_marker(user_id, MarkerKind.READ))
            case _:
                assert_never(inbox_filter)

        stmt = (
            select(MessageModel)
            .where(selector, ~_has_marker(user_id, MarkerKind.ARCHIVED))
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        if case_ref is not None:
            stmt = stmt.where(MessageModel.case_ref == case_ref)
        if sender_id is not None:
            stmt = stmt.where(MessageModel.sender_id == sender_id)
        if addressee_id is not None:
            stmt = stmt.where(_addressed_to(addressee_id))
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_thread(self, thread_id: str, user_id: int) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.thread_id == thread_id, _involves(user_id))
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count_unread(self, user_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(MessageModel)
            .where(
                _addressed_to(user_id),
                ~_has_marker(user_id, MarkerKind.READ),
                ~_has_marker(user_id, MarkerKind.ARCHIVED),
            )
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        self._session.add(mapper.entity_to_model(message))
        await self._session.flush()
        return message

    async def delete(self, message_id: UUID) -> bool:
        # Markers go with the message through ON DELETE CASCADE
        result = await self._session.execute(
            delete(MessageModel).where(MessageModel.id == message_id)
        )
        return result.rowcount > 0
