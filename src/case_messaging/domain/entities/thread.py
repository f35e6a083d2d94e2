from __future__ import annotations

from dataclasses import dataclass

from case_messaging.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class Thread:
    """Conversation view derived from messages sharing a thread id. Never stored."""

    thread_id: str
    root: Message
    messages: tuple[Message, ...]
    last_message: Message
    unread: bool
    participants: frozenset[int]

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def case_ref(self) -> str | None:
        return self.root.case_ref
