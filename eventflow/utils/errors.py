"""Standardized error payloads and the workflow error taxonomy."""
from typing import Any


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


class WorkflowError(Exception):
    """Base class for user-presentable errors raised by the approval core."""

    code = "WORKFLOW_ERROR"
    status_code = 400
    default_message = "The request could not be processed."

    def __init__(self, message: str | None = None, **details: Any) -> None:
        self.message = message or self.default_message
        self.details = {key: value for key, value in details.items() if value is not None}
        super().__init__(self.message)

    def to_response(self) -> dict[str, Any]:
        return error_response(self.code, self.message, self.details or None)


class UnauthorizedRoleError(WorkflowError):
    """The actor's role cannot perform this action from any state."""

    code = "UNAUTHORIZED_ROLE"
    status_code = 403
    default_message = "Your role is not allowed to perform this action."


class InvalidTransitionError(WorkflowError):
    """The role is right but the event's current status forbids the action."""

    code = "INVALID_TRANSITION"
    status_code = 409
    default_message = "The event's current status does not allow this action."


class RemarksRequiredError(WorkflowError):
    code = "REMARKS_REQUIRED"
    status_code = 422
    default_message = "Remarks are required to reject or return an event."


class VenueUnavailableError(WorkflowError):
    code = "VENUE_UNAVAILABLE"
    status_code = 409
    default_message = "Venue is not available at the selected date and time."


class RevocationWindowClosedError(WorkflowError):
    code = "REVOCATION_WINDOW_CLOSED"
    status_code = 409
    default_message = "Revocation is not allowed on or after the event date."


class NotFoundError(WorkflowError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found."


class AlreadyExistsError(WorkflowError):
    code = "ALREADY_EXISTS"
    status_code = 409
    default_message = "A record with the same unique value already exists."


class ConcurrentModificationError(WorkflowError):
    """Lost a compare-and-swap race; the caller should retry with fresh state."""

    code = "CONCURRENT_MODIFICATION"
    status_code = 409
    default_message = "The event was modified concurrently. Please retry."


__all__ = [
    "error_response",
    "WorkflowError",
    "UnauthorizedRoleError",
    "InvalidTransitionError",
    "RemarksRequiredError",
    "VenueUnavailableError",
    "RevocationWindowClosedError",
    "NotFoundError",
    "AlreadyExistsError",
    "ConcurrentModificationError",
]
