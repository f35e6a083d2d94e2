from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    CLIENT = "client"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"
    PARTNER = "partner"
    ASSISTANT = "assistant"
    ACCOUNTANT = "accountant"
    SECRETARY = "secretary"
    JURIST = "jurist"
    INTERN = "intern"
    VISITOR = "visitor"


class RoleTier(StrEnum):
    CLIENT = "client"
    STAFF = "staff"
    PARTNER = "partner"
    RESTRICTED = "restricted"


_TIERS: dict[Role, RoleTier] = {
    Role.CLIENT: RoleTier.CLIENT,
    Role.ADMIN: RoleTier.STAFF,
    Role.SUPERADMIN: RoleTier.STAFF,
    Role.PARTNER: RoleTier.PARTNER,
    Role.ASSISTANT: RoleTier.RESTRICTED,
    Role.ACCOUNTANT: RoleTier.RESTRICTED,
    Role.SECRETARY: RoleTier.RESTRICTED,
    Role.JURIST: RoleTier.RESTRICTED,
    Role.INTERN: RoleTier.RESTRICTED,
    Role.VISITOR: RoleTier.RESTRICTED,
}

STAFF_ROLES: frozenset[Role] = frozenset(r for r, t in _TIERS.items() if t is RoleTier.STAFF)


def tier_of(role: Role) -> RoleTier:
    return _TIERS[role]


class MessageCategory(StrEnum):
    CLIENT_TO_STAFF = "client_to_staff"
    STAFF_TO_CLIENT = "staff_to_client"
    STAFF_TO_STAFF = "staff_to_staff"
    PARTNER_TO_STAFF = "partner_to_staff"


class MarkerKind(StrEnum):
    READ = "read"
    ARCHIVED = "archived"


class InboxFilter(StrEnum):
    ALL = "all"
    SENT = "sent"
    RECEIVED = "received"
    UNREAD = "unread"


class NotificationKind(StrEnum):
    MESSAGE_RECEIVED = "message_received"
    MESSAGE_IN_COPY = "message_in_copy"
    MESSAGE_READ = "message_read"
    MESSAGE_OBSERVED = "message_observed"


class TrashItemType(StrEnum):
    MESSAGE = "message"
    DOCUMENT = "document"
    CASE = "case"
    APPOINTMENT = "appointment"
    TASK = "task"
    NOTIFICATION = "notification"
    OTHER = "other"


class TransmissionStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REFUSED = "refused"
    REVOKED = "revoked"
