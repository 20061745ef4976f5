"""Post, rating and favorite schemas."""

from datetime import datetime
from typing import Any

from src.schemas.base import CamelModel


class PostResponse(CamelModel):
    """Post response."""

    id: int
    title: str
    text: str
    image: str
    author_id: int
    created_at: datetime
    updated_at: datetime


class RatedPostResponse(PostResponse):
    """Post with its rating summary."""

    average_rating: float
    votes_count: int


class PostDetailResponse(PostResponse):
    """Single post with author information."""

    author_name: str
    author_email: str | None = None


class RatingSummaryResponse(CamelModel):
    average_rating: float
    votes_count: int
    my_rating: int


class RatingUpdate(CamelModel):
    """Rating request; validated and clamped by the service."""

    rating: Any = None


class FavoriteStatusResponse(CamelModel):
    favorite: bool
