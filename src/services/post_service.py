"""Post service for listing and creating posts."""

import logging
from typing import Any

from fastapi import UploadFile
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.post import Post
from src.models.user import User
from src.services.errors import InvalidInputError
from src.services.media import MediaKind, MediaStore
from src.services.queries import get_post_or_raise
from src.services.rating_service import RatingService, post_fields

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "Unknown"


class PostService:
    """Service for post-related operations."""

    def __init__(
        self,
        db: Session,
        ratings: RatingService | None = None,
        media: MediaStore | None = None,
    ):
        self.db = db
        self.ratings = ratings or RatingService(db)
        self.media = media or MediaStore()
        self.settings = get_settings()

    def list_all(self) -> list[dict[str, Any]]:
        """All posts, newest first, with rating summaries."""
        posts = self.db.query(Post).order_by(Post.created_at.desc(), Post.id.desc()).all()
        return self.ratings.enrich(posts)

    def list_mine(self, user_id: int) -> list[dict[str, Any]]:
        """The user's own posts, newest first, with rating summaries."""
        posts = (
            self.db.query(Post)
            .filter(Post.author_id == user_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )
        return self.ratings.enrich(posts)

    def list_latest(self, num: int) -> list[dict[str, Any]]:
        """The newest ``num`` posts, with rating summaries."""
        limit = self.settings.supported_post_count
        if num <= 0 or num > limit:
            raise InvalidInputError(f"Parameter N must be a whole number between 1 and {limit}.")

        posts = (
            self.db.query(Post)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(num)
            .all()
        )
        return self.ratings.enrich(posts)

    def get_with_author(self, post_id: int) -> dict[str, Any]:
        """Get a post with its author's display name and e-mail."""
        post = get_post_or_raise(self.db, post_id)

        author = self.db.query(User).filter(User.id == post.author_id).first()
        author_name = UNKNOWN_AUTHOR
        author_email = None
        if author:
            author_name = author.full_name or author.email or UNKNOWN_AUTHOR
            author_email = author.email

        return {
            **post_fields(post),
            "author_name": author_name,
            "author_email": author_email,
        }

    async def create(
        self,
        author_id: int,
        title: str | None,
        text: str | None,
        image: UploadFile | None,
    ) -> Post:
        """Create a post with a required image.

        Raises:
            InvalidInputError: if title/text are blank or the image is missing/invalid.
        """
        title = (title or "").strip()
        text = (text or "").strip()
        if not title or not text:
            raise InvalidInputError("Required fields: title, text")
        if image is None or not image.filename:
            raise InvalidInputError("Required field: image (file)")

        image_url = await self.media.save(image, MediaKind.POSTS)

        post = Post(title=title, text=text, image=image_url, author_id=author_id)
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)

        logger.info(f"User {author_id} created post {post.id}")
        return post
