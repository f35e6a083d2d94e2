from __future__ import annotations

from typing import Protocol

from case_messaging.domain.entities.user import DirectoryUser
from case_messaging.domain.value_objects.enums import Role


class UserDirectory(Protocol):
    """Read-only view of the user/role directory owned by the wider application."""

    async def resolve_user(self, user_id: int) -> DirectoryUser | None: ...

    async def resolve_users(self, user_ids: list[int]) -> list[DirectoryUser]: ...

    async def list_active_staff(self) -> list[DirectoryUser]: ...

    async def list_active_users_by_role(self, role: Role) -> list[DirectoryUser]: ...

    async def list_active_users(self) -> list[DirectoryUser]: ...


class CaseTransmissionChecker(Protocol):
    async def is_transmitted_to_partner(self, case_ref: str, partner_id: int) -> bool:
        """True if the case was transmitted to the partner and not refused or revoked."""
        ...
