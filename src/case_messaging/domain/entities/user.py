from __future__ import annotations

from dataclasses import dataclass

from case_messaging.domain.value_objects.enums import Role, RoleTier, tier_of


@dataclass(frozen=True, slots=True)
class DirectoryUser:
    """A user as seen through the directory collaborator."""

    id: int
    role: Role
    active: bool
    display_name: str
    phone: str | None = None

    @property
    def tier(self) -> RoleTier:
        return tier_of(self.role)

    @property
    def is_staff(self) -> bool:
        return self.tier is RoleTier.STAFF
