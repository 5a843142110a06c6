"""Credential store: the only module that reads or writes `User` documents.

Reads come in two projections. `get_public` and friends return a `PublicUser`
that never carries the password hash or refresh token. `get_with_credentials`
and `find_by_identifier` return the full document and are meant for password
and refresh-token checks only.
"""
from __future__ import annotations

from bson.objectid import ObjectId
from mongoengine import NotUniqueError, Q

from app.models.base import utc_now
from app.models.user import PRIVATE_FIELDS, PublicUser, User


class DuplicateUserError(Exception):
    """Raised when a write collides with an existing roll number or email."""


def _object_id(user_id: str) -> ObjectId | None:
    return ObjectId(user_id) if ObjectId.is_valid(user_id) else None


def _identity_query(email_id: str | None = None, roll_no: str | None = None) -> Q | None:
    query = None
    if email_id:
        query = Q(email_id=email_id)
    if roll_no:
        query = Q(roll_no=roll_no) if query is None else query | Q(roll_no=roll_no)
    return query


def exists(email_id: str | None = None, roll_no: str | None = None) -> bool:
    """Single existence query matching either identity field."""
    query = _identity_query(email_id=email_id, roll_no=roll_no)
    if query is None:
        return False
    return User.objects(query).only("id").first() is not None


def find_by_identifier(email_id: str | None = None, roll_no: str | None = None) -> User | None:
    query = _identity_query(email_id=email_id, roll_no=roll_no)
    if query is None:
        return None
    return User.objects(query).first()


def get_with_credentials(user_id: str) -> User | None:
    oid = _object_id(user_id)
    if oid is None:
        return None
    return User.objects(id=oid).first()


def get_public(user_id: str) -> PublicUser | None:
    oid = _object_id(user_id)
    if oid is None:
        return None
    user = User.objects(id=oid).exclude(*PRIVATE_FIELDS).first()
    return PublicUser.from_document(user) if user else None


def create_user(roll_no: str, name: str, email_id: str, password_hash: str) -> PublicUser:
    """Insert a new user. The unique indexes decide races the pre-check missed."""
    user = User(roll_no=roll_no, name=name, email_id=email_id, password=password_hash)
    try:
        user.save()
    except NotUniqueError as exc:
        raise DuplicateUserError(str(exc)) from exc
    return PublicUser.from_document(user)


def set_refresh_token(user_id: str, refresh_token: str) -> None:
    """Store `refresh_token` as the only one honoured for the user."""
    User.objects(id=_object_id(user_id)).update_one(
        set__refresh_token=refresh_token,
        set__updated_at=utc_now(),
    )


def replace_refresh_token(user_id: str, expected: str, refresh_token: str) -> bool:
    """Swap `expected` for `refresh_token` in one conditional write.

    Returns False when `expected` is no longer the stored token, so only one of
    several concurrent refreshes presenting the same token can win.
    """
    updated = User.objects(id=_object_id(user_id), refresh_token=expected).update_one(
        set__refresh_token=refresh_token,
        set__updated_at=utc_now(),
    )
    return updated == 1


def clear_refresh_token(user_id: str) -> None:
    User.objects(id=_object_id(user_id)).update_one(
        unset__refresh_token=True,
        set__updated_at=utc_now(),
    )


def set_password_hash(user_id: str, password_hash: str) -> None:
    # Targeted update: the rest of the document is not revalidated
    User.objects(id=_object_id(user_id)).update_one(
        set__password=password_hash,
        set__updated_at=utc_now(),
    )


def email_taken_by_other(email_id: str, user_id: str) -> bool:
    return User.objects(email_id=email_id, id__ne=_object_id(user_id)).only("id").first() is not None


def update_profile(user_id: str, name: str | None = None, email_id: str | None = None) -> PublicUser | None:
    """Apply only the supplied fields and return the refreshed public view."""
    updates = {"set__updated_at": utc_now()}
    if name is not None:
        updates["set__name"] = name
    if email_id is not None:
        updates["set__email_id"] = email_id

    try:
        User.objects(id=_object_id(user_id)).update_one(**updates)
    except NotUniqueError as exc:
        raise DuplicateUserError(str(exc)) from exc
    return get_public(user_id)


__all__ = [
    "DuplicateUserError",
    "exists",
    "find_by_identifier",
    "get_with_credentials",
    "get_public",
    "create_user",
    "set_refresh_token",
    "replace_refresh_token",
    "clear_refresh_token",
    "set_password_hash",
    "email_taken_by_other",
    "update_profile",
]
