"""Rating aggregation service.

Ratings are never stored in aggregate form: the mean and count of a post are
computed from the ``ratings`` rows on every read, so they can never drift from
the underlying data.
"""

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.models.post import Post
from src.models.rating import MAX_RATING, MIN_RATING, Rating
from src.services.errors import InvalidInputError
from src.services.queries import ensure_post_exists

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatingSummary:
    """Mean and count of a post's ratings."""

    average_rating: float = 0.0
    votes_count: int = 0


EMPTY_SUMMARY = RatingSummary()


def parse_rating_value(raw_value: Any) -> int:
    """Convert raw input to a stored rating value.

    Out-of-range numbers saturate to the nearest bound instead of being
    rejected (0 -> 1, 99 -> 5, infinity -> 5).

    Raises:
        InvalidInputError: if the value is missing, NaN or not numeric.
    """
    if raw_value is None or isinstance(raw_value, bool):
        raise InvalidInputError("Required field: rating (1-5)")
    if isinstance(raw_value, str) and not raw_value.strip():
        raise InvalidInputError("Required field: rating (1-5)")

    # Integers of any size clamp exactly, float() would overflow
    if isinstance(raw_value, int):
        return max(MIN_RATING, min(MAX_RATING, raw_value))

    try:
        number = float(raw_value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidInputError("Required field: rating (1-5)") from None

    if math.isnan(number):
        raise InvalidInputError("Required field: rating (1-5)")
    if math.isinf(number):
        return MAX_RATING if number > 0 else MIN_RATING

    return max(MIN_RATING, min(MAX_RATING, round(number)))


def post_fields(post: Post) -> dict[str, Any]:
    """Plain field dict of a post, ready to be extended with aggregates."""
    return {
        "id": post.id,
        "title": post.title,
        "text": post.text,
        "image": post.image,
        "author_id": post.author_id,
        "created_at": post.created_at,
        "updated_at": post.updated_at,
    }


class RatingService:
    """Service for rating posts and computing rating summaries."""

    def __init__(self, db: Session):
        self.db = db

    def summaries_for(self, post_ids: Iterable[int]) -> dict[int, RatingSummary]:
        """Compute summaries for a set of posts in one grouped query.

        The result is keyed by post ID and has no particular order. Posts
        without ratings are absent from it.
        """
        ids = list(set(post_ids))
        if not ids:
            return {}

        rows = (
            self.db.query(
                Rating.post_id,
                func.avg(Rating.value),
                func.count(Rating.id),
            )
            .filter(Rating.post_id.in_(ids))
            .group_by(Rating.post_id)
            .all()
        )
        return {
            post_id: RatingSummary(average_rating=float(avg or 0), votes_count=int(count))
            for post_id, avg, count in rows
        }

    def summary_for(self, post_id: int) -> RatingSummary:
        return self.summaries_for([post_id]).get(post_id, EMPTY_SUMMARY)

    def enrich(self, posts: Sequence[Post]) -> list[dict[str, Any]]:
        """Attach averageRating/votesCount to each post, keeping list order."""
        summaries = self.summaries_for(post.id for post in posts)

        enriched = []
        for post in posts:
            summary = summaries.get(post.id, EMPTY_SUMMARY)
            enriched.append(
                {
                    **post_fields(post),
                    "average_rating": summary.average_rating,
                    "votes_count": summary.votes_count,
                }
            )
        return enriched

    def get_my_rating(self, post_id: int, user_id: int) -> int:
        """Get the caller's rating of a post, 0 if not rated."""
        value = (
            self.db.query(Rating.value)
            .filter(Rating.user_id == user_id, Rating.post_id == post_id)
            .scalar()
        )
        return value or 0

    def get_summary(self, post_id: int, user_id: int) -> dict[str, Any]:
        """Get {average_rating, votes_count, my_rating} for a post.

        Raises:
            NotFoundError: if the post does not exist.
        """
        ensure_post_exists(self.db, post_id)

        summary = self.summary_for(post_id)
        return {
            "average_rating": summary.average_rating,
            "votes_count": summary.votes_count,
            "my_rating": self.get_my_rating(post_id, user_id),
        }

    def set_rating(self, post_id: int, user_id: int, raw_value: Any) -> dict[str, Any]:
        """Create or overwrite the caller's rating and return the new summary.

        Raises:
            InvalidInputError: if the value is missing or not numeric.
            NotFoundError: if the post does not exist.
        """
        value = parse_rating_value(raw_value)
        ensure_post_exists(self.db, post_id)

        self._upsert(post_id, user_id, value)

        summary = self.summary_for(post_id)
        return {
            "average_rating": summary.average_rating,
            "votes_count": summary.votes_count,
            "my_rating": value,
        }

    def _upsert(self, post_id: int, user_id: int, value: int) -> None:
        """Insert or update the (user, post) rating row."""
        rating = (
            self.db.query(Rating)
            .filter(Rating.user_id == user_id, Rating.post_id == post_id)
            .first()
        )
        if rating:
            rating.value = value
            self.db.commit()
            return

        self.db.add(Rating(user_id=user_id, post_id=post_id, value=value))
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent request inserted the pair first; last writer wins
            self.db.rollback()
            self.db.query(Rating).filter(
                Rating.user_id == user_id, Rating.post_id == post_id
            ).update({Rating.value: value}, synchronize_session=False)
            self.db.commit()
            logger.info(f"Rating insert raced for user {user_id} on post {post_id}, updated")

    def delete_for_posts(self, post_ids: Sequence[int]) -> int:
        """Delete every rating of the given posts. Does not commit."""
        if not post_ids:
            return 0
        return (
            self.db.query(Rating)
            .filter(Rating.post_id.in_(post_ids))
            .delete(synchronize_session=False)
        )

    def delete_by_user(self, user_id: int) -> int:
        """Delete every rating made by a user. Does not commit."""
        return (
            self.db.query(Rating)
            .filter(Rating.user_id == user_id)
            .delete(synchronize_session=False)
        )
