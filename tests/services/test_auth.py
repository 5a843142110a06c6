from datetime import timedelta

import pytest
from bson.objectid import ObjectId

from app.models.user import User
from app.services.auth import InvalidTokenError, hash_password, verify_password
from tests.conftest import make_token_service


def _user() -> User:
    return User(id=ObjectId(), roll_no="100", name="Ada", email_id="ada@x.com", password="unused")


class TestPasswordHasher:
    def test_hash_is_not_plaintext_and_verifies(self) -> None:
        digest = hash_password("password1")
        assert digest != "password1"
        assert verify_password("password1", digest)

    def test_hash_is_salted(self) -> None:
        assert hash_password("password1") != hash_password("password1")

    def test_wrong_password_is_false(self) -> None:
        assert not verify_password("password2", hash_password("password1"))

    def test_malformed_hash_is_false(self) -> None:
        assert not verify_password("password1", "not-a-bcrypt-hash")

    def test_missing_inputs_are_false(self) -> None:
        assert not verify_password("password1", None)
        assert not verify_password(None, hash_password("password1"))


class TestTokenService:
    def test_access_token_carries_identity_claims(self, tokens) -> None:
        user = _user()
        claims = tokens.verify_access(tokens.issue_access(user))

        assert claims["sub"] == str(user.id)
        assert claims["roll_no"] == "100"
        assert claims["email_id"] == "ada@x.com"
        assert claims["name"] == "Ada"
        assert claims["typ"] == "access"
        assert claims["exp"] > claims["iat"]

    def test_refresh_token_carries_only_subject(self, tokens) -> None:
        claims = tokens.verify_refresh(tokens.issue_refresh("abc123"))
        assert claims["sub"] == "abc123"
        assert "email_id" not in claims
        assert claims["typ"] == "refresh"

    def test_refresh_outlives_access(self, tokens) -> None:
        pair = tokens.issue_pair(_user())
        access = tokens.verify_access(pair.access_token)
        refresh = tokens.verify_refresh(pair.refresh_token)
        assert refresh["exp"] > access["exp"]

    def test_consecutive_tokens_differ(self, tokens) -> None:
        assert tokens.issue_refresh("abc123") != tokens.issue_refresh("abc123")

    def test_secrets_are_not_interchangeable(self, tokens) -> None:
        pair = tokens.issue_pair(_user())
        with pytest.raises(InvalidTokenError):
            tokens.verify_refresh(pair.access_token)
        with pytest.raises(InvalidTokenError):
            tokens.verify_access(pair.refresh_token)

    def test_wrong_type_with_shared_secret_is_rejected(self) -> None:
        service = make_token_service(refresh_secret="test-access-secret")
        with pytest.raises(InvalidTokenError):
            service.verify_refresh(service.issue_access(_user()))

    def test_foreign_signature_is_rejected(self, tokens) -> None:
        other = make_token_service(access_secret="someone-else")
        with pytest.raises(InvalidTokenError):
            tokens.verify_access(other.issue_access(_user()))

    def test_expired_token_is_rejected(self) -> None:
        service = make_token_service(access_expires=timedelta(seconds=-30))
        with pytest.raises(InvalidTokenError):
            service.verify_access(service.issue_access(_user()))

    def test_malformed_token_is_rejected(self, tokens) -> None:
        with pytest.raises(InvalidTokenError):
            tokens.verify_access("not.a.jwt")
