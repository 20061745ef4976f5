"""User service: registration, verification, login and profile management."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.enums import Gender
from src.models.user import User
from src.services.auth import (
    create_access_token,
    generate_verification_token,
    get_password_hash,
    hash_verification_token,
    verify_password,
)
from src.services.errors import (
    ConflictError,
    InvalidCredentialError,
    InvalidInputError,
    InvalidTokenError,
    NotVerifiedError,
)
from src.services.mail import dispatch_verification_email
from src.services.media import MediaKind, MediaStore
from src.services.queries import get_user_or_raise

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def parse_gender(value: Any) -> Gender:
    if isinstance(value, Gender):
        return value
    try:
        return Gender(str(value).strip().lower())
    except ValueError:
        raise InvalidInputError("Gender must be one of: male, female, other") from None


class UserService:
    """Service for user accounts."""

    def __init__(self, db: Session, media: MediaStore | None = None):
        self.db = db
        self.media = media or MediaStore()
        self.settings = get_settings()

    def get_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def create_user(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        gender: Gender | str,
    ) -> User:
        """Register an unverified user and send the verification e-mail.

        Raises:
            ConflictError: if the e-mail is already registered.
        """
        email = normalize_email(email)
        gender = parse_gender(gender)
        if self.get_by_email(email):
            raise ConflictError("A user with this email already exists")

        raw_token, token_hash = generate_verification_token()
        user = User(
            email=email,
            password_hash=get_password_hash(password),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            gender=gender.value,
            avatar_url=gender.default_avatar_url,
            is_verified=False,
            verification_token_hash=token_hash,
            verification_expires_at=self._verification_expiry(),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("A user with this email already exists") from None
        self.db.refresh(user)

        logger.info(f"Created user {user.id} ({user.email}), verification pending")
        dispatch_verification_email(user.email, raw_token)
        return user

    def authenticate(self, email: str, password: str) -> str:
        """Check credentials and issue an access token.

        Raises:
            InvalidCredentialError: if the e-mail is unknown or the password is wrong.
            NotVerifiedError: if the account has not been verified yet.
        """
        user = self.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentialError("Incorrect email/login or password")
        if not user.is_verified:
            raise NotVerifiedError("Account is not verified, check your inbox for the link")
        return create_access_token(user)

    def verify_account(self, raw_token: str) -> User:
        """Redeem a one-time verification token.

        Raises:
            InvalidTokenError: if the token is unknown, used or expired.
        """
        if not raw_token:
            raise InvalidTokenError()

        user = (
            self.db.query(User)
            .filter(User.verification_token_hash == hash_verification_token(raw_token))
            .first()
        )
        # Wrong and expired tokens are indistinguishable to the caller
        if not user or not user.verification_pending():
            raise InvalidTokenError()

        user.is_verified = True
        user.verification_token_hash = None
        user.verification_expires_at = None
        self.db.commit()

        logger.info(f"Verified user {user.id}")
        return user

    def resend_verification(self, email: str) -> None:
        """Issue a fresh token to an unverified account.

        Unknown and already verified addresses are ignored silently.
        """
        user = self.get_by_email(email)
        if not user or user.is_verified:
            logger.info("Verification resend requested for unknown or verified address")
            return

        raw_token, token_hash = generate_verification_token()
        user.verification_token_hash = token_hash
        user.verification_expires_at = self._verification_expiry()
        self.db.commit()

        dispatch_verification_email(user.email, raw_token)

    def get_me(self, user_id: int) -> User:
        return get_user_or_raise(self.db, user_id)

    def update_profile(
        self,
        user_id: int,
        first_name: str | None = None,
        last_name: str | None = None,
        gender: str | None = None,
    ) -> User:
        """Update the provided, non-empty profile fields."""
        user = get_user_or_raise(self.db, user_id)

        if first_name and first_name.strip():
            user.first_name = first_name.strip()
        if last_name and last_name.strip():
            user.last_name = last_name.strip()
        if gender:
            user.gender = parse_gender(gender).value

        self.db.commit()
        self.db.refresh(user)
        return user

    async def update_avatar(self, user_id: int, upload: UploadFile | None) -> User:
        """Store a new avatar and drop the previous internally hosted one."""
        if upload is None or not upload.filename:
            raise InvalidInputError("Missing file: avatar")

        user = get_user_or_raise(self.db, user_id)
        previous_url = user.avatar_url

        user.avatar_url = await self.media.save(upload, MediaKind.AVATARS)
        self.db.commit()
        self.db.refresh(user)

        if self.media.is_internal(previous_url) and previous_url != user.avatar_url:
            try:
                self.media.delete(previous_url, MediaKind.AVATARS)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not delete previous avatar of user {user_id}: {e}")

        return user

    def change_password(self, user_id: int, old_password: str, new_password: str) -> None:
        """Replace the password after confirming the old one.

        Raises:
            InvalidCredentialError: if the old password is wrong.
        """
        user = get_user_or_raise(self.db, user_id)
        if not verify_password(old_password, user.password_hash):
            raise InvalidCredentialError("Incorrect old password")

        user.password_hash = get_password_hash(new_password)
        self.db.commit()
        logger.info(f"User {user_id} changed password")

    def _verification_expiry(self) -> datetime:
        return datetime.now(UTC) + timedelta(minutes=self.settings.verification_token_ttl_minutes)
