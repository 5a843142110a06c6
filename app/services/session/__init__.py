"""Session controller: registration, login, token rotation and account edits.

Every operation raises an `ApiError` subclass on failure; the HTTP layer only
translates results into responses and cookies.
"""
from __future__ import annotations

import logging

from email_validator import EmailNotValidError, validate_email
from jose import JWTError
from mongoengine import OperationError
from pydantic import BaseModel
from pymongo.errors import PyMongoError

from app.models.user import PublicUser, User
from app.services import user_store
from app.services.auth import hash_password, verify_password
from app.services.auth.tokens import InvalidTokenError, TokenPair, TokenService
from app.utils.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)


logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


class LoginResult(BaseModel):
    user: PublicUser
    tokens: TokenPair


def _clean(value: str | None) -> str:
    return value.strip() if isinstance(value, str) else ""


def _normalize_email(email_id: str) -> str:
    try:
        validate_email(email_id, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError("Please provide a valid email address") from exc
    return email_id.lower()


def _check_password_strength(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    if "\x00" in password:
        raise ValidationError("Password must not contain NUL characters")


def _rotate_tokens(user: User, tokens: TokenService, expected: str | None = None) -> TokenPair:
    """Mint a new pair and store its refresh token, superseding any older one.

    With `expected`, the write only lands if that token is still the stored one.
    """
    try:
        pair = tokens.issue_pair(user)
        if expected is None:
            user_store.set_refresh_token(str(user.id), pair.refresh_token)
            rotated = True
        else:
            rotated = user_store.replace_refresh_token(str(user.id), expected, pair.refresh_token)
    except (JWTError, OperationError, PyMongoError) as exc:
        logger.exception("Token generation failed", extra={"user_id": str(user.id)})
        raise InternalError("Something went wrong while generating tokens") from exc

    if not rotated:
        logger.warning("Refresh token reuse detected", extra={"user_id": str(user.id)})
        raise UnauthorizedError("Refresh token is expired or used")
    return pair


def register(roll_no: str | None, name: str | None, email_id: str | None, password: str | None) -> PublicUser:
    roll_no, name, email_id = _clean(roll_no), _clean(name), _clean(email_id)
    if not all([roll_no, name, email_id, _clean(password)]):
        raise ValidationError("All fields are required")

    email_id = _normalize_email(email_id)
    _check_password_strength(password)

    # Fast path only; the unique indexes are the real guard
    if user_store.exists(email_id=email_id, roll_no=roll_no):
        raise ConflictError("User with email or roll number already exists")

    try:
        user = user_store.create_user(
            roll_no=roll_no,
            name=name,
            email_id=email_id,
            password_hash=hash_password(password),
        )
    except user_store.DuplicateUserError as exc:
        raise ConflictError("User with email or roll number already exists") from exc

    logger.info("User registered", extra={"user_id": user.id})
    return user


def login(email_id: str | None, roll_no: str | None, password: str | None, tokens: TokenService) -> LoginResult:
    email_id, roll_no = _clean(email_id).lower(), _clean(roll_no)
    if not (email_id or roll_no):
        raise ValidationError("Email or Roll Number is required")

    user = user_store.find_by_identifier(email_id=email_id or None, roll_no=roll_no or None)
    if user is None:
        raise NotFoundError("User does not exist")

    if not verify_password(password, user.password):
        logger.info("Rejected login", extra={"user_id": str(user.id)})
        raise UnauthorizedError("Invalid credentials")

    pair = _rotate_tokens(user, tokens)
    logger.info("User logged in", extra={"user_id": str(user.id)})
    return LoginResult(user=PublicUser.from_document(user), tokens=pair)


def logout(user_id: str) -> None:
    # Clearing an already-empty token is a no-op
    user_store.clear_refresh_token(user_id)
    logger.info("User logged out", extra={"user_id": user_id})


def refresh_access_token(incoming_refresh_token: str | None, tokens: TokenService) -> TokenPair:
    if not incoming_refresh_token:
        raise UnauthorizedError("Unauthorized request")

    try:
        claims = tokens.verify_refresh(incoming_refresh_token)
    except InvalidTokenError as exc:
        raise UnauthorizedError("Invalid refresh token") from exc

    user = user_store.get_with_credentials(claims["sub"])
    if user is None:
        raise UnauthorizedError("Invalid refresh token")

    if incoming_refresh_token != user.refresh_token:
        # A superseded or logged-out token being replayed
        logger.warning("Refresh token reuse detected", extra={"user_id": str(user.id)})
        raise UnauthorizedError("Refresh token is expired or used")

    pair = _rotate_tokens(user, tokens, expected=incoming_refresh_token)
    logger.info("Refresh token rotated", extra={"user_id": str(user.id)})
    return pair


def get_current_user(user: PublicUser) -> PublicUser:
    return user


def update_profile(user_id: str, name: str | None = None, email_id: str | None = None) -> PublicUser:
    name, email_id = _clean(name), _clean(email_id)
    if not (name or email_id):
        raise ValidationError("At least one field is required to update")

    if email_id:
        email_id = _normalize_email(email_id)
        if user_store.email_taken_by_other(email_id, user_id):
            raise ConflictError("Email is already in use")

    try:
        user = user_store.update_profile(user_id, name=name or None, email_id=email_id or None)
    except user_store.DuplicateUserError as exc:
        raise ConflictError("Email is already in use") from exc

    if user is None:
        raise NotFoundError("User does not exist")
    return user


def change_password(user_id: str, old_password: str | None, new_password: str | None) -> None:
    if not old_password or not new_password:
        raise ValidationError("Both old and new passwords are required")

    user = user_store.get_with_credentials(user_id)
    if user is None:
        raise NotFoundError("User does not exist")

    if not verify_password(old_password, user.password):
        raise ValidationError("Invalid old password")

    _check_password_strength(new_password)
    user_store.set_password_hash(user_id, hash_password(new_password))
    logger.info("Password changed", extra={"user_id": user_id})
