"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import Token, UserLogin, UserRegister, UserResponse
from src.schemas.base import CamelModel, OkResponse
from src.schemas.post import (
    PostDetailResponse,
    PostResponse,
    RatedPostResponse,
    RatingSummaryResponse,
    RatingUpdate,
)

__all__ = [
    "CamelModel",
    "OkResponse",
    "UserRegister",
    "UserLogin",
    "Token",
    "UserResponse",
    "PostResponse",
    "RatedPostResponse",
    "PostDetailResponse",
    "RatingSummaryResponse",
    "RatingUpdate",
]
