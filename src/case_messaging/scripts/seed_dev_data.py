"""Seed development data: directory users, a case transmission and a sample thread."""
from __future__ import annotations

import asyncio
import logging

from sqlalchemy.dialects.postgresql import insert as pg_insert

from case_messaging.application.dto.message import ComposeMessageDTO
from case_messaging.application.dto.principal import Principal
from case_messaging.config import settings
from case_messaging.domain.value_objects.enums import Role, TransmissionStatus
from case_messaging.infrastructure.db.base import Base
from case_messaging.infrastructure.db.models import CaseTransmissionModel, UserModel
from case_messaging.infrastructure.db.session import AsyncSessionLocal, engine
from case_messaging.infrastructure.db.uow import SqlAlchemyUoW
from case_messaging.logging_config import configure_logging
from case_messaging.services import message_service

logger = logging.getLogger(__name__)

CASE_REF = "CASE-2024-001"

USERS = [
    {"id": 1, "email": "admin@example.com", "first_name": "Alice", "last_name": "Martin",
     "role": Role.ADMIN.value, "phone": None},
    {"id": 2, "email": "super@example.com", "first_name": "Bruno", "last_name": "Lefevre",
     "role": Role.SUPERADMIN.value, "phone": None},
    {"id": 42, "email": "client@example.com", "first_name": "Chloe", "last_name": "Durand",
     "role": Role.CLIENT.value, "phone": "06 12 34 56 78"},
    {"id": 77, "email": "partner@example.com", "first_name": "David", "last_name": "Roux",
     "role": Role.PARTNER.value, "phone": None},
]


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        await session.execute(
            pg_insert(UserModel).values(USERS).on_conflict_do_nothing(index_elements=["id"])
        )
        await session.execute(
            pg_insert(CaseTransmissionModel).values(
                case_ref=CASE_REF, partner_id=77, status=TransmissionStatus.ACCEPTED.value,
            )
        )
        await session.commit()

        uow = SqlAlchemyUoW(session)
        client = Principal(user_id=42, role=Role.CLIENT, display_name="Chloe Durand")
        admin = Principal(user_id=1, role=Role.ADMIN, display_name="Alice Martin")

        first = await message_service.create_message(
            ComposeMessageDTO(
                subject="Question about my file",
                body="Hello, could you tell me where my case stands?",
                case_ref=CASE_REF,
            ),
            client,
            uow,
            notify_observers=settings.NOTIFY_STAFF_OBSERVERS,
        )
        await message_service.create_message(
            ComposeMessageDTO(
                subject="Re: Question about my file",
                body="The hearing is scheduled; we will send you the details shortly.",
                target=42,
                copy=(2,),
                parent_id=first.message.id,
            ),
            admin,
            uow,
            notify_observers=settings.NOTIFY_STAFF_OBSERVERS,
        )
        logger.info("Seeded thread %s on case %s", first.message.thread_id, CASE_REF)


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
