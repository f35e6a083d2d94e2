from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from case_messaging.domain.entities.message import Attachment, Message
from case_messaging.domain.value_objects.enums import MessageCategory


@dataclass(frozen=True, slots=True)
class ComposeMessageDTO:
    subject: str
    body: str
    target: int | None = None
    copy: tuple[int, ...] = ()
    case_ref: str | None = None
    parent_id: UUID | None = None
    attachments: tuple[Attachment, ...] = ()


@dataclass(frozen=True, slots=True)
class RoutingOutcome:
    recipients: frozenset[int]
    copies: frozenset[int]
    category: MessageCategory

    @property
    def principal_target(self) -> int | None:
        """The single addressee, when the message has exactly one."""
        if len(self.recipients) == 1:
            return next(iter(self.recipients))
        return None


@dataclass(slots=True)
class FanoutReport:
    created: int = 0
    skipped: int = 0
    failed: int = 0
    sms_sent: bool = False


@dataclass(frozen=True, slots=True)
class Persisted:
    """The message is committed; no side effects have run yet."""

    message: Message
    routing: RoutingOutcome


@dataclass(frozen=True, slots=True)
class FannedOut:
    """The message is committed and the best-effort fan-out phase has run."""

    message: Message
    routing: RoutingOutcome
    report: FanoutReport = field(default_factory=FanoutReport)
