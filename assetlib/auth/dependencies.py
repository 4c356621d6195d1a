"""
Authentication dependencies for FastAPI.

Users authenticate against the fronting proxy, which forwards their
username in the `AUTH_USER_HEADER` header. Users are registered on first
sight.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from assetlib.config import Settings, get_settings
from assetlib.core.exceptions import UnauthorizedException
from assetlib.db.session import get_db
from assetlib.models.user import USERNAME_MAX_LENGTH, User
from assetlib.services.user_service import UserService


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User | None:
    """
    Dependency to optionally get the current user.
    Returns None for anonymous requests.

    In development mode (DEV_MODE=true), anonymous requests act as the
    development user.
    """
    username = request.headers.get(settings.AUTH_USER_HEADER, "").strip()
    email = None

    if not username:
        if not settings.DEV_MODE:
            return None
        username = settings.DEV_USER_NAME
        email = settings.DEV_USER_EMAIL

    if len(username) > USERNAME_MAX_LENGTH:
        raise UnauthorizedException(f"Usernames are limited to {USERNAME_MAX_LENGTH} characters")

    user = await UserService(db).get_or_create(username, email=email)
    # Store in request state for access in endpoints
    request.state.user = user
    return user


async def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    """
    Dependency to get the current authenticated user.

    Raises:
        UnauthorizedException: If the request is anonymous
    """
    if user is None:
        raise UnauthorizedException()
    return user


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
