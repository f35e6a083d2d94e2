"""Delete trash entries older than the retention period."""
from __future__ import annotations

import argparse
import asyncio
import logging

from case_messaging.config import settings
from case_messaging.infrastructure.db.session import AsyncSessionLocal
from case_messaging.infrastructure.db.uow import SqlAlchemyUoW
from case_messaging.logging_config import configure_logging
from case_messaging.services import trash_service

logger = logging.getLogger(__name__)


async def purge(retention_days: int) -> int:
    async with AsyncSessionLocal() as session:
        async with SqlAlchemyUoW(session) as uow:
            return await trash_service.purge_expired(uow, retention_days=retention_days)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--retention-days",
        type=int,
        default=settings.TRASH_RETENTION_DAYS,
        help="keep entries deleted within this many days (default: %(default)s)",
    )
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)
    removed = asyncio.run(purge(args.retention_days))
    logger.info("Trash purge finished, %d entries removed", removed)


if __name__ == "__main__":
    main()
