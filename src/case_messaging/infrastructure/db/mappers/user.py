from __future__ import annotations

import logging

from case_messaging.domain.entities.user import DirectoryUser
from case_messaging.domain.value_objects.enums import Role
from case_messaging.infrastructure.db.models.directory import UserModel

logger = logging.getLogger(__name__)


def _role(raw: str) -> Role:
    try:
        return Role(raw)
    except ValueError:
        logger.warning("Unknown role %r in user directory, treating as visitor", raw)
        return Role.VISITOR


def model_to_entity(model: UserModel) -> DirectoryUser:
    name = " ".join(p for p in (model.first_name, model.last_name) if p)
    return DirectoryUser(
        id=model.id,
        role=_role(model.role),
        active=model.is_active,
        display_name=name or model.email,
        phone=model.phone or None,
    )
