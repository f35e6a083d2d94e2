"""Attachments kept on a local volume, one file per storage key."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalAttachmentStore:
    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    def _path_for(self, key: str) -> Path | None:
        path = (self._root / key).resolve()
        # Keys come from stored rows but must never escape the root
        if not path.is_relative_to(self._root) or path == self._root:
            logger.warning("Rejected attachment key outside storage root: %r", key)
            return None
        return path

    async def locate(self, key: str) -> Path | None:
        path = self._path_for(key)
        if path is None:
            return None
        if not await asyncio.to_thread(path.is_file):
            return None
        return path
