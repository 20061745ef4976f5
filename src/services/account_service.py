"""Account lifecycle service: cascading deletion of users and posts.

Ratings and favorites live in their own tables and reference both a user and a
post, with no ``ON DELETE`` cascade in the database. Deleting either endpoint
therefore runs an explicit, ordered sequence that removes the dependent rows
first, so a crash part-way through can leave orphaned files on disk but never a
rating or favorite pointing at a missing post.

File removal is best-effort and not transactional with the database: each
failure is logged and the sequence continues.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.post import Post
from src.models.user import User
from src.services.auth import verify_password
from src.services.errors import ForbiddenError, InvalidCredentialError
from src.services.favorite_service import FavoriteService
from src.services.media import MediaKind, MediaStore
from src.services.queries import get_post_or_raise, get_user_or_raise
from src.services.rating_service import RatingService

logger = logging.getLogger(__name__)


@dataclass
class DeletionReport:
    """What a cascading delete removed."""

    posts: int = 0
    ratings: int = 0
    favorites: int = 0
    files_deleted: int = 0
    files_failed: int = 0


class AccountService:
    """Orchestrates deletes that cascade across posts, ratings, favorites and media."""

    def __init__(
        self,
        db: Session,
        ratings: RatingService | None = None,
        favorites: FavoriteService | None = None,
        media: MediaStore | None = None,
    ):
        self.db = db
        self.ratings = ratings or RatingService(db)
        self.favorites = favorites or FavoriteService(db)
        self.media = media or MediaStore()
        self.settings = get_settings()

    def delete_account(self, user_id: int, password: str) -> DeletionReport:
        """Delete a user and everything they own.

        Raises:
            NotFoundError: if the user does not exist.
            InvalidCredentialError: if the password does not match.
        """
        # Step 1: Confirm the password
        user = get_user_or_raise(self.db, user_id)
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialError("Incorrect password")

        report = DeletionReport()

        # Step 2: Enumerate the user's posts
        posts = self.db.query(Post).filter(Post.author_id == user_id).all()
        post_ids = [post.id for post in posts]
        image_urls = [post.image for post in posts]

        # Step 3: Ratings and favorites other users left on those posts
        report.ratings += self.ratings.delete_for_posts(post_ids)
        report.favorites += self.favorites.delete_for_posts(post_ids)

        # Step 4: Post images
        for url in image_urls:
            self._delete_file(url, MediaKind.POSTS, report)

        # Step 5: Avatar, unless it is an external default
        if self.media.is_internal(user.avatar_url):
            self._delete_file(user.avatar_url, MediaKind.AVATARS, report)

        # Step 6: Ratings and favorites the user made
        report.ratings += self.ratings.delete_by_user(user_id)
        report.favorites += self.favorites.delete_by_user(user_id)

        # Step 7: The posts themselves
        if post_ids:
            report.posts = (
                self.db.query(Post)
                .filter(Post.id.in_(post_ids))
                .delete(synchronize_session=False)
            )

        # Step 8: The user
        self.db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
        self.db.commit()

        logger.info(
            f"Deleted account {user_id}: {report.posts} posts, {report.ratings} ratings, "
            f"{report.favorites} favorites, {report.files_deleted} files "
            f"({report.files_failed} file deletions failed)"
        )
        return report

    def delete_post(self, post_id: int, caller_id: int) -> DeletionReport:
        """Delete a post with its ratings, favorites and image.

        Any authenticated caller may delete any post unless
        ``post_delete_requires_owner`` is enabled.

        Raises:
            NotFoundError: if the post does not exist.
            ForbiddenError: if ownership is required and the caller is not the author.
        """
        post = get_post_or_raise(self.db, post_id)
        if self.settings.post_delete_requires_owner and post.author_id != caller_id:
            raise ForbiddenError("Only the author can delete this post")

        image_url = post.image
        report = DeletionReport(posts=1)
        report.ratings = self.ratings.delete_for_posts([post_id])
        report.favorites = self.favorites.delete_for_posts([post_id])
        self.db.delete(post)
        self.db.commit()

        self._delete_file(image_url, MediaKind.POSTS, report)

        logger.info(
            f"User {caller_id} deleted post {post_id} "
            f"({report.ratings} ratings, {report.favorites} favorites)"
        )
        return report

    def _delete_file(self, url: str, kind: MediaKind, report: DeletionReport) -> None:
        """Remove a stored file, recording but never raising failures."""
        try:
            if self.media.delete(url, kind):
                report.files_deleted += 1
        except (OSError, ValueError) as e:
            report.files_failed += 1
            logger.warning(f"Could not delete {kind.value} file for {url}: {e}")
