"""
Authentication endpoints.

Endpoints:
- POST /api/v1/auth/register - Register new user
- POST /api/v1/auth/login - Login with email/password
- GET /api/v1/auth/me - Current user profile
- PATCH /api/v1/auth/me - Update name and display name
- POST /api/v1/auth/change-password - Change password

Logout is handled client-side by discarding the token.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from taskhub.db.base import get_db
from taskhub.core.security import get_password_hash, verify_password, create_access_token
from taskhub.core.deps import get_current_user
from taskhub.models.user import User
from taskhub.schemas.auth import (
    UserCreate,
    UserLogin,
    UserUpdate,
    PasswordChange,
    UserResponse,
    TokenResponse,
)
from taskhub.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def user_to_response(user: User) -> UserResponse:
    """Convert User model to UserResponse schema."""
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        display_name=user.display_name,
        created=user.created,
        updated=user.updated,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """Register a new user."""
    if user_data.password != user_data.passwordConfirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Passwords do not match"
        )

    email = user_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    user = User(
        email=email,
        password_hash=get_password_hash(user_data.password),
        name=user_data.name.strip(),
        display_name=user_data.display_name,
    )
    db.add(user)
    await db.commit()  # Commit immediately so a following login can find the user

    logger.info("User registered id=%s", user.id)
    return user_to_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Authenticate user with email/password."""
    result = await db.execute(select(User).where(User.email == credentials.identity.lower()))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid email or password"
        )

    return TokenResponse(
        token=create_access_token(subject=user.id),
        record=user_to_response(user)
    )


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user."""
    return user_to_response(current_user)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    user_data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update the authenticated user's profile."""
    if user_data.name is not None:
        current_user.name = user_data.name
    if user_data.display_name is not None:
        # An empty display name falls back to the account name
        current_user.display_name = user_data.display_name or None

    current_user.touch()
    await db.commit()

    logger.info("Profile updated id=%s", current_user.id)
    return user_to_response(current_user)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    password_data: PasswordChange,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Change the password after re-checking the current one."""
    if not verify_password(password_data.currentPassword, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )

    if password_data.password != password_data.passwordConfirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="New passwords do not match"
        )

    current_user.password_hash = get_password_hash(password_data.password)
    current_user.touch()
    await db.commit()

    logger.info("Password changed id=%s", current_user.id)
    return MessageResponse(message="Password changed successfully")
