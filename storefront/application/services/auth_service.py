"""Auth service — password hashing, session/activation JWTs and the session cookie."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Response
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from storefront.config import get_settings
from storefront.core.exceptions import InvalidTokenException

settings = get_settings()
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(data: dict, secret: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"iat": now, "exp": now + expires_delta})
    return jwt.encode(to_encode, secret, algorithm=settings.JWT_ALGORITHM)


def create_session_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        {"id": user_id},
        settings.SECRET_KEY,
        expires_delta or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES),
    )


def decode_session_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def create_activation_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        {"id": user_id},
        settings.ACTIVATION_SECRET,
        expires_delta or timedelta(minutes=settings.ACTIVATION_TOKEN_EXPIRATION_MINUTES),
    )


def verify_activation_token(token: str) -> str:
    """Return the user id carried by an activation token.

    Raises InvalidTokenException when the token is expired, was signed with
    another key, or carries no user id.
    """
    try:
        payload = jwt.decode(token, settings.ACTIVATION_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise InvalidTokenException("Activation link has expired")
    except JWTError:
        raise InvalidTokenException()

    user_id = payload.get("id")
    if not user_id:
        raise InvalidTokenException()
    return user_id


def set_session_cookie(response: Response, token: str) -> None:
    # No max_age: the JWT's own exp claim bounds the session
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="none",
        secure=True,
    )


def clear_session_cookie(response: Response) -> None:
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value="",
        expires=0,
        max_age=0,
        httponly=True,
        samesite="none",
        secure=True,
    )
