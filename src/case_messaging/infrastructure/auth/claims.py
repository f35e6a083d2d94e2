from __future__ import annotations

import logging
from typing import Any

from case_messaging.application.dto.principal import Principal
from case_messaging.domain.value_objects.enums import Role

logger = logging.getLogger(__name__)


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build a Principal from ``sub``, ``role`` and the optional ``name`` claim."""
    role_raw = payload.get("role", Role.VISITOR.value)
    try:
        role = Role(role_raw)
    except ValueError:
        logger.warning("Token for subject %s carries unknown role %r", payload.get("sub"), role_raw)
        role = Role.VISITOR
    return Principal(
        user_id=int(payload["sub"]),
        role=role,
        display_name=payload.get("name") or "",
    )
