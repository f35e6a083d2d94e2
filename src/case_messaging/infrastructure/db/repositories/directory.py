from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from case_messaging.domain.entities.user import DirectoryUser
from case_messaging.domain.value_objects.enums import STAFF_ROLES, Role, TransmissionStatus
from case_messaging.infrastructure.db.mappers import user as mapper
from case_messaging.infrastructure.db.models.directory import CaseTransmissionModel, UserModel

_REJECTED = (TransmissionStatus.REFUSED.value, TransmissionStatus.REVOKED.value)


class UserDirectoryRepo:
    """Directory lookups against the shared ``users`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _list(self, *criteria) -> list[DirectoryUser]:
        stmt = (
            select(UserModel)
            .where(UserModel.is_active.is_(True), *criteria)
            .order_by(UserModel.last_name, UserModel.first_name, UserModel.id)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def resolve_user(self, user_id: int) -> DirectoryUser | None:
        model = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(model) if model else None

    async def resolve_users(self, user_ids: list[int]) -> list[DirectoryUser]:
        if not user_ids:
            return []
        result = await self._session.execute(
            select(UserModel).where(UserModel.id.in_(user_ids))
        )
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_active_staff(self) -> list[DirectoryUser]:
        return await self._list(UserModel.role.in_([r.value for r in STAFF_ROLES]))

    async def list_active_users_by_role(self, role: Role) -> list[DirectoryUser]:
        return await self._list(UserModel.role == role.value)

    async def list_active_users(self) -> list[DirectoryUser]:
        return await self._list()


class CaseTransmissionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def is_transmitted_to_partner(self, case_ref: str, partner_id: int) -> bool:
        stmt = (
            select(CaseTransmissionModel.id)
            .where(
                CaseTransmissionModel.case_ref == case_ref,
                CaseTransmissionModel.partner_id == partner_id,
                CaseTransmissionModel.status.not_in(_REJECTED),
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None
