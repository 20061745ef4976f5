"""User account API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from src.api.dependencies import get_account_service, get_current_user, get_user_service
from src.models.user import User
from src.schemas.auth import (
    AccountDelete,
    AvatarResponse,
    PasswordChange,
    ResendVerificationRequest,
    Token,
    UserLogin,
    UserProfileUpdate,
    UserRegister,
    UserResponse,
)
from src.schemas.base import OkResponse
from src.services.account_service import AccountService
from src.services.errors import InvalidInputError
from src.services.user_service import UserService

router = APIRouter(prefix="/api/user", tags=["user"])


@router.post("/create", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserRegister,
    users: Annotated[UserService, Depends(get_user_service)],
):
    """Register a new user and send the activation e-mail."""
    return users.create_user(
        email=user_data.email,
        password=user_data.password,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        gender=user_data.gender,
    )


@router.post("/auth", response_model=Token)
def authenticate(
    credentials: UserLogin,
    users: Annotated[UserService, Depends(get_user_service)],
):
    """Login with email (or legacy ``login``) and password."""
    if not credentials.identifier:
        raise InvalidInputError("Required fields: email/login and password")
    return Token(token=users.authenticate(credentials.identifier, credentials.password))


@router.get("/verify", response_model=OkResponse)
def verify_account(
    users: Annotated[UserService, Depends(get_user_service)],
    token: Annotated[str, Query(min_length=1)],
):
    """Redeem the one-time token from the activation e-mail."""
    users.verify_account(token)
    return OkResponse()


@router.post("/verify/resend", response_model=OkResponse)
def resend_verification(
    request: ResendVerificationRequest,
    users: Annotated[UserService, Depends(get_user_service)],
):
    """Send a fresh activation e-mail to an unverified account."""
    users.resend_verification(request.email)
    return OkResponse()


@router.delete("/logout/{user_id}", response_model=OkResponse)
def logout(user_id: int):
    """Logout (client should discard token)."""
    return OkResponse()


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
    users: Annotated[UserService, Depends(get_user_service)],
):
    """Get current user information."""
    return users.get_me(current_user.id)


@router.put("/me", response_model=UserResponse)
def update_me(
    profile: UserProfileUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    users: Annotated[UserService, Depends(get_user_service)],
):
    """Update first name, last name and gender."""
    return users.update_profile(
        current_user.id,
        first_name=profile.first_name,
        last_name=profile.last_name,
        gender=profile.gender,
    )


@router.put("/me/password", response_model=OkResponse)
def change_password(
    passwords: PasswordChange,
    current_user: Annotated[User, Depends(get_current_user)],
    users: Annotated[UserService, Depends(get_user_service)],
):
    """Change password after confirming the old one."""
    users.change_password(current_user.id, passwords.old_password, passwords.new_password)
    return OkResponse()


@router.delete("/me", response_model=OkResponse)
def delete_me(
    confirmation: AccountDelete,
    current_user: Annotated[User, Depends(get_current_user)],
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Delete the account with all posts, ratings, favorites and uploaded files."""
    accounts.delete_account(current_user.id, confirmation.password)
    return OkResponse()


@router.post("/me/avatar", response_model=AvatarResponse)
async def upload_avatar(
    current_user: Annotated[User, Depends(get_current_user)],
    users: Annotated[UserService, Depends(get_user_service)],
    avatar: Annotated[UploadFile | None, File(description="Avatar image (JPEG, PNG, WebP)")] = None,
):
    """Replace the avatar.

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    return await users.update_avatar(current_user.id, avatar)
