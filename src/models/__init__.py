"""SQLAlchemy models."""

from src.models.favorite import Favorite
from src.models.post import Post
from src.models.rating import Rating
from src.models.user import User

__all__ = [
    "User",
    "Post",
    "Rating",
    "Favorite",
]
