"""Favorites API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import get_current_user, get_favorite_service
from src.models.user import User
from src.schemas.base import OkResponse
from src.schemas.post import FavoriteStatusResponse, PostResponse
from src.services.favorite_service import FavoriteService

router = APIRouter(prefix="/api/favorites", tags=["favorites"])


@router.get("", response_model=list[PostResponse])
def list_my_favorites(
    current_user: Annotated[User, Depends(get_current_user)],
    favorites: Annotated[FavoriteService, Depends(get_favorite_service)],
):
    """List favorited posts, most recently favorited first."""
    return favorites.list_my_favorites(current_user.id)


@router.get("/{post_id}", response_model=FavoriteStatusResponse)
def get_favorite_status(
    post_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    favorites: Annotated[FavoriteService, Depends(get_favorite_service)],
):
    """Check whether the caller has favorited a post."""
    return FavoriteStatusResponse(favorite=favorites.is_favorite(current_user.id, post_id))


@router.post("/{post_id}", response_model=OkResponse, status_code=status.HTTP_201_CREATED)
def add_favorite(
    post_id: int,
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    favorites: Annotated[FavoriteService, Depends(get_favorite_service)],
):
    """Add a post to favorites. Adding it twice is not an error."""
    created = favorites.add_favorite(current_user.id, post_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return OkResponse()


@router.delete("/{post_id}", response_model=OkResponse)
def remove_favorite(
    post_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    favorites: Annotated[FavoriteService, Depends(get_favorite_service)],
):
    """Remove a post from favorites, whether or not it was there."""
    favorites.remove_favorite(current_user.id, post_id)
    return OkResponse()
