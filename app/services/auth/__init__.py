import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from app.models.user import PublicUser
from app.services import user_store
from app.services.auth.tokens import InvalidTokenError, TokenPair, TokenService
from app.utils.config import settings
from app.utils.errors import UnauthorizedError


logger = logging.getLogger(__name__)

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)
bearer_scheme = HTTPBearer(auto_error=False)


def verify_password(plain: str, hashed: str | None) -> bool:
    """Verify plaintext password against a bcrypt hash.

    Malformed or missing hashes count as a mismatch.
    """
    if not plain or not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


def hash_password(plain: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return pwd_context.hash(plain)


def get_token_service() -> TokenService:
    return TokenService.from_settings(settings)


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> PublicUser:
    """Auth dependency resolving the access token to the caller's public view.

    The `accessToken` cookie wins over an `Authorization: Bearer` header.
    """
    token = request.cookies.get(ACCESS_COOKIE) or (credentials.credentials if credentials else None)
    if not token:
        raise UnauthorizedError("Unauthorized request")

    try:
        claims = tokens.verify_access(token)
    except InvalidTokenError as exc:
        logger.info("Rejected access token: %s", exc)
        raise UnauthorizedError("Invalid access token") from exc

    user = user_store.get_public(claims["sub"])
    if user is None:
        raise UnauthorizedError("Invalid access token")

    request.state.user = user
    return user


__all__ = [
    "ACCESS_COOKIE",
    "REFRESH_COOKIE",
    "InvalidTokenError",
    "TokenPair",
    "TokenService",
    "get_current_user",
    "get_token_service",
    "hash_password",
    "verify_password",
]
