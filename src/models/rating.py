"""Rating model."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, UniqueConstraint

from src.database import Base
from src.models.mixins import TimestampMixin

MIN_RATING = 1
MAX_RATING = 5


class Rating(Base, TimestampMixin):
    """A user's 1-5 rating of a post. At most one per (user, post)."""

    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_ratings_user_post"),
        CheckConstraint(f"value BETWEEN {MIN_RATING} AND {MAX_RATING}", name="ck_ratings_value"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    value = Column(Integer, nullable=False)
