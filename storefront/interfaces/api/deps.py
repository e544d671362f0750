"""FastAPI dependency — session cookie auth."""

from typing import Optional

from fastapi import Depends
from fastapi.security import APIKeyCookie

from storefront.application.services.auth_service import decode_session_token
from storefront.config import get_settings
from storefront.core.exceptions import ForbiddenException, UnauthorizedException
from storefront.domain.models.user import User
from storefront.domain.repositories.user_repository import UserRepository
from storefront.interfaces.deps import get_user_repository

settings = get_settings()
session_cookie = APIKeyCookie(name=settings.COOKIE_NAME, auto_error=False)


def get_current_user(
    token: Optional[str] = Depends(session_cookie),
    repo: UserRepository = Depends(get_user_repository),
) -> User:
    """Resolve the user behind the session cookie."""
    if not token:
        raise UnauthorizedException()

    payload = decode_session_token(token)
    if payload is None or not payload.get("id"):
        raise UnauthorizedException("Session is invalid or expired")

    user = repo.get_by_id(payload["id"])
    if user is None:
        raise UnauthorizedException("User no longer exists")

    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Require admin role."""
    if not user.is_admin:
        raise ForbiddenException(f"{user.role} can not access this resource!")
    return user
