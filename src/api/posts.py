"""Post API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from src.api.dependencies import get_account_service, get_current_user, get_post_service
from src.models.user import User
from src.schemas.base import OkResponse
from src.schemas.post import PostDetailResponse, PostResponse, RatedPostResponse
from src.services.account_service import AccountService
from src.services.post_service import PostService

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.get("", response_model=list[RatedPostResponse])
def list_posts(
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """List all posts, newest first, with rating summaries."""
    return posts.list_all()


@router.get("/me", response_model=list[RatedPostResponse])
def list_my_posts(
    current_user: Annotated[User, Depends(get_current_user)],
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """List the current user's posts."""
    return posts.list_mine(current_user.id)


@router.get("/n/{num}", response_model=list[RatedPostResponse])
def list_latest_posts(
    num: int,
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """List the newest N posts."""
    return posts.list_latest(num)


@router.get("/{post_id}", response_model=PostDetailResponse)
def get_post(
    post_id: int,
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """Get a post with its author's name."""
    return posts.get_with_author(post_id)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    current_user: Annotated[User, Depends(get_current_user)],
    posts: Annotated[PostService, Depends(get_post_service)],
    title: Annotated[str | None, Form()] = None,
    text: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | None, File(description="Post image (JPEG, PNG or WebP)")] = None,
):
    """Create a post (multipart: title, text, image).

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    return await posts.create(current_user.id, title, text, image)


@router.delete("/{post_id}", response_model=OkResponse)
def delete_post(
    post_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Delete a post together with its ratings, favorites and image."""
    accounts.delete_post(post_id, current_user.id)
    return OkResponse()
