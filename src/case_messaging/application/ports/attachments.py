from __future__ import annotations

from pathlib import Path
from typing import Protocol


class AttachmentStore(Protocol):
    async def locate(self, key: str) -> Path | None:
        """Local path of the stored file, or None when it is gone or the key is invalid."""
        ...
