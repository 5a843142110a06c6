from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt, JWTError
from pydantic import BaseModel

from app.models.user import User
from app.utils.base import TokenType
from app.utils.config import Settings


class InvalidTokenError(Exception):
    """Raised when a token is malformed, expired, forged or of the wrong type."""


class TokenPair(BaseModel):
    """Pair of JWT tokens used by the client for auth and refresh."""
    access_token: str
    refresh_token: str


class TokenService:
    """Signs and verifies access and refresh tokens.

    Access and refresh tokens use independent secrets and lifetimes: a leaked
    access token dies quickly, a leaked refresh token dies on the next rotation.
    """

    def __init__(
        self,
        access_secret: str,
        access_expires: timedelta,
        refresh_secret: str,
        refresh_expires: timedelta,
        algorithm: str = "HS256",
    ) -> None:
        self.access_secret = access_secret
        self.access_expires = access_expires
        self.refresh_secret = refresh_secret
        self.refresh_expires = refresh_expires
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            access_secret=settings.access_token_secret,
            access_expires=timedelta(minutes=settings.access_token_expires_minutes),
            refresh_secret=settings.refresh_token_secret,
            refresh_expires=timedelta(days=settings.refresh_token_expires_days),
            algorithm=settings.jwt_algorithm,
        )

    def _sign(self, claims: dict[str, Any], secret: str, expires_delta: timedelta, token_type: TokenType) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "iat": int(now.timestamp()),
            "exp": int((now + expires_delta).timestamp()),
            # Unique per token so two tokens minted in the same second still differ
            "jti": uuid.uuid4().hex,
            "typ": token_type.value,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def issue_access(self, user: User) -> str:
        """Sign the identity claims needed to serve a request without a lookup."""
        claims = {
            "sub": str(user.id),
            "roll_no": user.roll_no,
            "email_id": user.email_id,
            "name": user.name,
        }
        return self._sign(claims, self.access_secret, self.access_expires, TokenType.ACCESS)

    def issue_refresh(self, user_id: str) -> str:
        return self._sign({"sub": str(user_id)}, self.refresh_secret, self.refresh_expires, TokenType.REFRESH)

    def issue_pair(self, user: User) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access(user),
            refresh_token=self.issue_refresh(str(user.id)),
        )

    def verify(self, token: str, secret: str, token_type: TokenType) -> dict[str, Any]:
        """Decode `token`, raising `InvalidTokenError` on any failure including expiry."""
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except JWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        if not payload.get("sub") or payload.get("typ") != token_type.value:
            raise InvalidTokenError("Token claims are incomplete")
        return payload

    def verify_access(self, token: str) -> dict[str, Any]:
        return self.verify(token, self.access_secret, TokenType.ACCESS)

    def verify_refresh(self, token: str) -> dict[str, Any]:
        return self.verify(token, self.refresh_secret, TokenType.REFRESH)
