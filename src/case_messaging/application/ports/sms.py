from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class SmsResult:
    success: bool
    skipped: bool = False
    reason: str | None = None
    provider_id: str | None = None


class SmsDispatcher(Protocol):
    async def send_notification_sms(
        self,
        phone: str,
        template_kind: str,
        variables: dict[str, Any],
    ) -> SmsResult: ...
