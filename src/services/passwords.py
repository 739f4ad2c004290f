"""Password hashing and verification."""

import logging

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from src.domain.errors import UnexpectedError

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class PasswordHasher:
    """One-way hashing capability handed to the user entity.

    Failures of the underlying primitive are never the caller's fault, so they
    surface as UnexpectedError rather than as validation errors.
    """

    def __init__(self, context: CryptContext | None = None):
        self.context = context or pwd_context

    def hash(self, plaintext: str) -> str:
        """Hash a password."""
        try:
            return self.context.hash(plaintext)
        except (ValueError, TypeError) as e:
            logger.error(f"Password hashing failed: {e}")
            raise UnexpectedError("failed to hash password") from e

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Verify a password against its hash."""
        try:
            return self.context.verify(plaintext, hashed)
        except (UnknownHashError, ValueError, TypeError) as e:
            logger.error(f"Stored password hash could not be verified: {e}")
            raise UnexpectedError("failed to verify password") from e


def get_password_hasher() -> PasswordHasher:
    """Get the default password hasher."""
    return PasswordHasher()
