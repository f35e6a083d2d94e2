from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class ForbiddenError(AppError):
    pass


class ConflictError(AppError):
    pass


class ValidationError(AppError):
    pass


class CaseRequiredError(ValidationError):
    def __init__(self) -> None:
        super().__init__("A new message must be linked to a case")


class RoutingError(AppError):
    """A message could not be routed. Nothing has been written."""

    code = "routing_error"
    status_code = 400
    default_detail = "Message could not be routed"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.default_detail)


class NoStaffAvailable(RoutingError):
    code = "no_staff_available"
    default_detail = "No staff member is available to receive this message"


class NotAuthorizedForCase(RoutingError):
    code = "not_authorized_for_case"
    status_code = 403
    default_detail = "This case has not been transmitted to you or was refused"


class InvalidTarget(RoutingError):
    code = "invalid_target"
    default_detail = "Messages can only be addressed to staff members"


class TargetRequired(RoutingError):
    code = "target_required"
    default_detail = "A recipient must be selected"


class SelfAddressed(RoutingError):
    code = "self_addressed"
    default_detail = "You cannot send a message to yourself"


class RecipientNotFound(RoutingError):
    code = "recipient_not_found"
    default_detail = "Recipient not found or inactive"


class InvalidCopyRecipient(RoutingError):
    code = "invalid_copy_recipient"
    default_detail = "One or more copy recipients are invalid"


class ClientToClientForbidden(RoutingError):
    code = "client_to_client_forbidden"
    status_code = 403
    default_detail = "Clients can only be reached through staff"
