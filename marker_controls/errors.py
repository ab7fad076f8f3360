"""
Error taxonomy for marker controls.

Every error here is recoverable: it aborts the current operation only and is
logged by whoever raises it. The command layer turns them into error
responses carrying ``code``.
"""


class MarkerControlError(Exception):
    """Base class for marker control errors."""

    code = "MARKER_CONTROL_ERROR"

    def to_response(self) -> dict:
        """Convert to a command error response."""
        return {
            "status": "error",
            "message": str(self),
            "code": self.code,
        }


class UninitializedCollaboratorError(MarkerControlError):
    """A required collaborator (registry, publisher) is not set up."""

    code = "UNINITIALIZED_COLLABORATOR"


class MarkerNotFoundError(MarkerControlError):
    """Referenced marker does not exist in the registry."""

    code = "MARKER_NOT_FOUND"


class InvalidInputError(MarkerControlError, ValueError):
    """Caller supplied invalid input (e.g. empty frame names)."""

    code = "INVALID_INPUT"


class UnexpectedEventKindError(MarkerControlError):
    """Feedback event kind is not handled."""

    code = "UNEXPECTED_EVENT_KIND"
