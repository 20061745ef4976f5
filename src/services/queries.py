"""Lookups shared by the services."""

from sqlalchemy.orm import Session

from src.models.post import Post
from src.models.user import User
from src.services.errors import InvalidInputError, NotFoundError


def get_post_or_raise(db: Session, post_id: int | None) -> Post:
    """Get a post by ID or raise NotFoundError."""
    if post_id is None:
        raise InvalidInputError("Missing parameter: postId")
    post = db.query(Post).filter(Post.id == post_id).first()
    if not post:
        raise NotFoundError(f"Post {post_id} not found")
    return post


def ensure_post_exists(db: Session, post_id: int | None) -> None:
    """Like get_post_or_raise, without loading the row."""
    if post_id is None:
        raise InvalidInputError("Missing parameter: postId")
    if db.query(Post.id).filter(Post.id == post_id).first() is None:
        raise NotFoundError(f"Post {post_id} not found")


def get_user_or_raise(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user
