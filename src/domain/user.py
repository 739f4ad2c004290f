"""User entity, its field rules and its public projection."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from src.domain.errors import IncorrectCredentialError, ValidationError

MIN_PASSWORD_LENGTH = 8
MIN_AGE = 0
MAX_AGE = 150


class Hasher(Protocol):
    """Password hashing capability consumed by the entity."""

    def hash(self, plaintext: str) -> str: ...

    def verify(self, plaintext: str, hashed: str) -> bool: ...


def _check_name_and_email(name: str, email: str) -> None:
    if not name:
        raise ValidationError("name cannot be empty")
    if not email:
        raise ValidationError("email cannot be empty")


def _check_age(age: int) -> None:
    if age < MIN_AGE or age > MAX_AGE:
        raise ValidationError(f"age must be between {MIN_AGE} and {MAX_AGE}")


def validate_password(password: str) -> str:
    """Trim a plaintext password and enforce the length rules."""
    password = password.strip()
    if not password:
        raise ValidationError("password cannot be empty")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
    return password


def validate_profile(name: str, email: str, age: int) -> tuple[str, str, int]:
    """Validate the mutable profile fields. Never touches the password."""
    name = name.strip()
    email = email.strip()
    _check_name_and_email(name, email)
    _check_age(age)
    return name, email, age


def validate_new_user(name: str, email: str, password: str, age: int) -> tuple[str, str, str, int]:
    """Validate and normalize everything needed to create a user.

    Checks run in a fixed order (name, email, password, age) so the first
    failing rule is the one reported.
    """
    name = name.strip()
    email = email.strip()
    _check_name_and_email(name, email)
    password = validate_password(password)
    _check_age(age)
    return name, email, password, age


@dataclass(frozen=True)
class PublicUser:
    """Output-only view of a user. Carries no credential."""

    id: int
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: datetime


@dataclass
class User:
    """The user aggregate.

    ``id`` is None until the repository assigns one on create. Every
    mutation refreshes ``updated_at``.
    """

    name: str
    email: str
    password_hash: str
    age: int
    created_at: datetime
    updated_at: datetime
    id: int | None = None

    @classmethod
    def create(cls, name: str, email: str, password: str, age: int, hasher: Hasher) -> "User":
        """Validate raw input, hash the password and build a new user."""
        name, email, password, age = validate_new_user(name, email, password, age)
        password_hash = hasher.hash(password)
        now = datetime.now(UTC)
        return cls(
            name=name,
            email=email,
            password_hash=password_hash,
            age=age,
            created_at=now,
            updated_at=now,
        )

    def update_profile(self, name: str, email: str, age: int) -> None:
        """Replace name, email and age after validating them."""
        self.name, self.email, self.age = validate_profile(name, email, age)
        self.updated_at = datetime.now(UTC)

    def check_password(self, password: str, hasher: Hasher) -> bool:
        return hasher.verify(password.strip(), self.password_hash)

    def change_password(self, old_password: str, new_password: str, hasher: Hasher) -> None:
        """Verify the old password, then hash and store the new one.

        The entity is left untouched when any check fails.
        """
        if not self.check_password(old_password, hasher):
            raise IncorrectCredentialError()
        new_password = validate_password(new_password)
        self.password_hash = hasher.hash(new_password)
        self.updated_at = datetime.now(UTC)

    def to_public(self) -> PublicUser:
        if self.id is None:
            raise ValueError("cannot project a user that has not been persisted")
        return PublicUser(
            id=self.id,
            name=self.name,
            email=self.email,
            age=self.age,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
