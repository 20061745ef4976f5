"""Rating API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.api.dependencies import get_current_user, get_rating_service
from src.models.user import User
from src.schemas.post import RatingSummaryResponse, RatingUpdate
from src.services.rating_service import RatingService

router = APIRouter(prefix="/api/ratings", tags=["ratings"])


@router.get("/{post_id}", response_model=RatingSummaryResponse)
def get_rating_summary(
    post_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    ratings: Annotated[RatingService, Depends(get_rating_service)],
):
    """Get averageRating, votesCount and the caller's own rating."""
    return ratings.get_summary(post_id, current_user.id)


@router.put("/{post_id}", response_model=RatingSummaryResponse)
def set_rating(
    post_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    ratings: Annotated[RatingService, Depends(get_rating_service)],
    payload: RatingUpdate | None = None,
):
    """Set or change the caller's rating (1-5, out-of-range values are clamped).

    Returns the updated summary so clients need no second request.
    """
    raw_value = payload.rating if payload else None
    return ratings.set_rating(post_id, current_user.id, raw_value)
