from __future__ import annotations

from typing import Protocol
from uuid import UUID

from case_messaging.domain.entities.message import Message
from case_messaging.domain.value_objects.enums import InboxFilter


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> Message | None: ...

    async def list_by_ids(self, message_ids: list[UUID]) -> list[Message]: ...

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
        """Messages matching the filter, never those archived by the user.

        ``sender_id`` and ``addressee_id`` narrow the result further; the
        addressee may be a recipient or in copy.
        """
        ...

    async def list_thread(self, thread_id: str, user_id: int) -> list[Message]:
        """Thread messages the user is involved in, oldest first. Archived ones included."""
        ...

    async def count_unread(self, user_id: int) -> int: ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message:
        """Insert the message together with its read/archive markers."""
        ...

    async def delete(self, message_id: UUID) -> bool: ...
