"""Favorites service."""

import logging
from collections.abc import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.models.favorite import Favorite
from src.models.post import Post
from src.services.queries import ensure_post_exists

logger = logging.getLogger(__name__)


class FavoriteService:
    """Service for bookmarking posts."""

    def __init__(self, db: Session):
        self.db = db

    def list_my_favorites(self, user_id: int) -> list[Post]:
        """Get the user's favorited posts, most recently favorited first.

        Favorites whose post no longer exists are skipped.
        """
        post_ids = [
            post_id
            for (post_id,) in self.db.query(Favorite.post_id)
            .filter(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
            .all()
        ]
        if not post_ids:
            return []

        # IN does not preserve order, restore the favorite order
        posts_by_id = {
            post.id: post for post in self.db.query(Post).filter(Post.id.in_(post_ids)).all()
        }
        return [posts_by_id[post_id] for post_id in post_ids if post_id in posts_by_id]

    def is_favorite(self, user_id: int, post_id: int) -> bool:
        return (
            self.db.query(Favorite.id)
            .filter(Favorite.user_id == user_id, Favorite.post_id == post_id)
            .first()
            is not None
        )

    def add_favorite(self, user_id: int, post_id: int | None) -> bool:
        """Favorite a post. Adding an existing favorite succeeds.

        Returns:
            True if a new favorite was created, False if it already existed.

        Raises:
            InvalidInputError: if post_id is missing.
            NotFoundError: if the post does not exist.
        """
        ensure_post_exists(self.db, post_id)

        if self.is_favorite(user_id, post_id):
            return False

        self.db.add(Favorite(user_id=user_id, post_id=post_id))
        try:
            self.db.commit()
        except IntegrityError:
            # Unique (user_id, post_id): a concurrent add won, which is fine
            self.db.rollback()
            return False

        logger.info(f"User {user_id} favorited post {post_id}")
        return True

    def remove_favorite(self, user_id: int, post_id: int) -> None:
        """Remove a favorite whether or not it exists."""
        self.db.query(Favorite).filter(
            Favorite.user_id == user_id, Favorite.post_id == post_id
        ).delete(synchronize_session=False)
        self.db.commit()

    def delete_for_posts(self, post_ids: Sequence[int]) -> int:
        """Delete every favorite of the given posts. Does not commit."""
        if not post_ids:
            return 0
        return (
            self.db.query(Favorite)
            .filter(Favorite.post_id.in_(post_ids))
            .delete(synchronize_session=False)
        )

    def delete_by_user(self, user_id: int) -> int:
        """Delete every favorite made by a user. Does not commit."""
        return (
            self.db.query(Favorite)
            .filter(Favorite.user_id == user_id)
            .delete(synchronize_session=False)
        )
