"""
Domain errors raised by the service layer.

Services never raise HTTPException; ``taskhub.main`` maps these onto HTTP
responses with a single exception handler.
"""
from fastapi import status


class TaskHubError(Exception):
    """Base class for errors surfaced to the caller as a message."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TaskHubError):
    """Input failed a field or business constraint; nothing was written."""
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ValidationError):
    """Input collides with existing state (e.g. member already on the team)."""
    status_code = status.HTTP_409_CONFLICT


class PermissionDenied(TaskHubError):
    """The acting user's role does not allow the action; nothing was written."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(TaskHubError):
    """A referenced project, task or subtask does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class StoreError(TaskHubError):
    """The database read or write failed."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class RecalculationWarning(TaskHubError):
    """
    Progress bookkeeping failed after a successful task write.

    Mutators catch this and report it next to the successful result; it is
    never turned into an error response.
    """
