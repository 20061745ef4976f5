"""User model."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from src.database import Base
from src.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication and content ownership."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)  # Lowercased
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    gender = Column(String(10), nullable=False)  # "male" | "female" | "other"
    avatar_url = Column(String(1024), nullable=False)

    # Email verification (token is stored as a SHA-256 digest, never raw)
    is_verified = Column(Boolean, nullable=False, default=False)
    verification_token_hash = Column(String(64), nullable=True, index=True)
    verification_expires_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def verification_pending(self, now: datetime | None = None) -> bool:
        """Check if an unexpired verification token is outstanding."""
        if not self.verification_token_hash or self.verification_expires_at is None:
            return False
        expires_at = self.verification_expires_at
        # SQLite drops tzinfo on the way back
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at > (now or datetime.now(UTC))
