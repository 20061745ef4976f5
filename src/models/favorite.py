"""Favorite model."""

from sqlalchemy import Column, ForeignKey, Integer, UniqueConstraint

from src.database import Base
from src.models.mixins import TimestampMixin


class Favorite(Base, TimestampMixin):
    """Bookmark of a post by a user. At most one per (user, post)."""

    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "post_id", name="uq_favorites_user_post"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
