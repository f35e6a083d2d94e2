"""Who gets an "observed" notification for a staff-initiated conversation.

Every active staff member not already addressed is told about the message,
so the whole team stays aware of outgoing conversations. This grows with the
size of the staff; ``enabled`` lets deployments switch it off without touching
the rest of the fan-out.
"""
from __future__ import annotations

from collections.abc import Iterable

from case_messaging.domain.entities.user import DirectoryUser
from case_messaging.domain.value_objects.enums import MessageCategory

OBSERVED_CATEGORIES = frozenset(
    {
        MessageCategory.STAFF_TO_CLIENT,
        MessageCategory.STAFF_TO_STAFF,
        MessageCategory.PARTNER_TO_STAFF,
    }
)


def select_observers(
    category: MessageCategory,
    active_staff: Iterable[DirectoryUser],
    *,
    sender_id: int,
    recipients: Iterable[int],
    copies: Iterable[int],
    enabled: bool = True,
) -> list[int]:
    if not enabled or category not in OBSERVED_CATEGORIES:
        return []
    addressed = {sender_id, *recipients, *copies}
    return sorted({u.id for u in active_staff if u.active and u.id not in addressed})
