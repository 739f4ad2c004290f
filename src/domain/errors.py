"""Error hierarchy for the user service.

Every error carries a human-readable ``message`` and the HTTP status the API
layer maps it to. ``UnexpectedError`` keeps its detail for the logs and
exposes only a generic public message.
"""


class UserServiceError(Exception):
    """Base exception for all user service errors."""

    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def public_message(self) -> str:
        return self.message


class ValidationError(UserServiceError):
    """Input failed a field-level rule. Always client-caused."""

    http_status = 400


class NotFoundError(UserServiceError):
    """The identifier does not resolve to a user."""

    http_status = 404

    def __init__(self, message: str = "user not found"):
        super().__init__(message)


class ConflictError(UserServiceError):
    """Email uniqueness violation."""

    http_status = 409

    def __init__(self, message: str = "user with this email already exists"):
        super().__init__(message)


class IncorrectCredentialError(UserServiceError):
    """The old password supplied to a password change did not match."""

    http_status = 401

    def __init__(self, message: str = "old password is incorrect"):
        super().__init__(message)


class UnexpectedError(UserServiceError):
    """Store or hashing failure. Detail is logged, never returned."""

    http_status = 500

    @property
    def public_message(self) -> str:
        return "an unexpected error occurred"
