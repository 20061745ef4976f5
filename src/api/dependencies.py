"""FastAPI dependencies for authentication, database and services."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from src.database import get_db
from src.models.user import User
from src.services.account_service import AccountService
from src.services.auth import decode_access_token, strip_bearer_prefix
from src.services.errors import UnauthenticatedError
from src.services.favorite_service import FavoriteService
from src.services.media import MediaStore
from src.services.post_service import PostService
from src.services.rating_service import RatingService
from src.services.user_service import UserService

AUTH_HEADER = "x-auth-token"

# Token is sent in a custom header, with or without a "Bearer " prefix
auth_header = APIKeyHeader(name=AUTH_HEADER, auto_error=False)


def _resolve_user(db: Session, header_value: str | None) -> User | None:
    if not header_value:
        return None

    payload = decode_access_token(strip_bearer_prefix(header_value.strip()))
    if payload is None:
        return None

    user_id = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        return None

    return db.query(User).filter(User.id == int(user_id)).first()


def get_current_user(
    token: Annotated[str | None, Depends(auth_header)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from the JWT in x-auth-token."""
    if not token:
        raise UnauthenticatedError("Missing token")

    user = _resolve_user(db, token)
    if user is None:
        raise UnauthenticatedError("Invalid or expired token")

    return user


def get_media_store() -> MediaStore:
    """Get media store instance."""
    return MediaStore()


def get_rating_service(
    db: Annotated[Session, Depends(get_db)],
) -> RatingService:
    return RatingService(db)


def get_favorite_service(
    db: Annotated[Session, Depends(get_db)],
) -> FavoriteService:
    return FavoriteService(db)


def get_post_service(
    db: Annotated[Session, Depends(get_db)],
    media: Annotated[MediaStore, Depends(get_media_store)],
) -> PostService:
    """Get post service with dependencies."""
    return PostService(db, RatingService(db), media)


def get_account_service(
    db: Annotated[Session, Depends(get_db)],
    media: Annotated[MediaStore, Depends(get_media_store)],
) -> AccountService:
    """Get account lifecycle service with dependencies."""
    return AccountService(db, RatingService(db), FavoriteService(db), media)


def get_user_service(
    db: Annotated[Session, Depends(get_db)],
    media: Annotated[MediaStore, Depends(get_media_store)],
) -> UserService:
    """Get user service with dependencies."""
    return UserService(db, media)
