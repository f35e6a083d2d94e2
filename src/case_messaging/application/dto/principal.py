from __future__ import annotations

from dataclasses import dataclass

from case_messaging.domain.value_objects.enums import Role, RoleTier, tier_of


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    user_id: int
    role: Role
    display_name: str = ""

    @property
    def tier(self) -> RoleTier:
        return tier_of(self.role)

    @property
    def is_staff(self) -> bool:
        return self.tier is RoleTier.STAFF

    @property
    def label(self) -> str:
        return self.display_name or f"user #{self.user_id}"
