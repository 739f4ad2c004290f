"""User model."""

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String, func

from src.database import Base


class User(Base):
    """Row in the users table.

    Timestamps default to now() in the database; the service always writes
    them explicitly so created_at and updated_at follow the entity.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("age >= 0 AND age <= 150", name="ck_users_age_range"),
        Index("idx_users_email", "email"),
        Index("idx_users_name", "name"),
        Index("idx_users_age", "age"),
        Index("idx_users_created_at", "created_at"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    age = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
