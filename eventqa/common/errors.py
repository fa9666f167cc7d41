"""Domain error hierarchy shared by every service.

Each error carries the HTTP status it maps to, so route handlers only need
to translate an `ApiError` into the response envelope.
"""


class ApiError(Exception):
    """Base class for errors that are safe to show to the caller."""

    status = 500
    default_message = "Internal server error."

    def __init__(self, message: str = None, status: int = None):
        self.message = message or self.default_message
        if status is not None:
            self.status = status
        super().__init__(self.message)


# --- Input ---
class ValidationError(ApiError):
    """Missing or malformed request input."""

    status = 400
    default_message = "All fields are required."


# --- Identity ---
class Unauthorized(ApiError):
    """Missing credentials, bad password, or unusable token."""

    status = 401
    default_message = "Unauthorized."


class InvalidToken(Unauthorized):
    """Token failed signature, format, or expiry checks."""

    status = 403
    default_message = "Unauthorized: Invalid token."


# --- Lookup ---
class NotFound(ApiError):
    """Referenced entity does not exist."""

    status = 404
    default_message = "Not found."


class NotFoundOrForbidden(NotFound):
    """Ownership-conditional write touched no rows (missing or not yours)."""

    default_message = "Event not found or you're not authorized."


# --- Uniqueness ---
class Conflict(ApiError):
    """A uniqueness constraint rejected the write."""

    status = 400
    default_message = "Resource already exists."


class AlreadyAttending(Conflict):
    default_message = "You are already attending this event."


class AlreadyVoted(Conflict):
    default_message = "You have already voted on this question."


# --- Storage ---
class Internal(ApiError):
    """Unexpected storage failure."""

    default_message = "Database error."
