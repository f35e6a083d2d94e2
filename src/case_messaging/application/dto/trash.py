from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class TrashStatsDTO:
    total: int
    by_type: dict[str, int] = field(default_factory=dict)
    expiring_soon: int = 0
