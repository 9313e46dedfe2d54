"""Error taxonomy for the submission protocol.

Every failure a request can end in maps to exactly one of these classes. The
HTTP layer renders them as ``{"error": code, "message": message}`` with the
class' status code.
"""


class SubmissionError(Exception):
    """Base class for request-terminating protocol failures."""

    code = "internal"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(SubmissionError):
    """Malformed request body, nonce mismatch or integrity metadata mismatch."""

    code = "invalid_input"
    status_code = 400


class UnauthenticatedError(SubmissionError):
    """Missing, invalid or expired identity token."""

    code = "unauthenticated"
    status_code = 401


class ForbiddenError(SubmissionError):
    """Session is owned by a different identity."""

    code = "forbidden"
    status_code = 403


class NotFoundError(SubmissionError):
    """Session or uploaded object does not exist."""

    code = "not_found"
    status_code = 404


class ConflictError(SubmissionError):
    """Session already completed or a concurrent completion won."""

    code = "conflict"
    status_code = 409


class ExpiredError(SubmissionError):
    """Session deadline plus grace period has passed."""

    code = "expired"
    status_code = 410


class InternalError(SubmissionError):
    """Downstream collaborator failure or exceeded request budget."""
