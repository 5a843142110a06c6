from datetime import timedelta

import mongomock
import pytest
from fastapi.testclient import TestClient
from mongoengine import connect, disconnect

from app.models.user import User
from app.services.auth import TokenService, get_token_service


@pytest.fixture
def mongo():
    """In-memory MongoDB with the real unique indexes on `users`."""
    connect(
        "accounts_test",
        host="mongodb://localhost",
        alias="default",
        mongo_client_class=mongomock.MongoClient,
        tz_aware=True,
    )
    User.ensure_indexes()
    try:
        yield
    finally:
        User.drop_collection()
        disconnect(alias="default")


def make_token_service(**overrides) -> TokenService:
    options = {
        "access_secret": "test-access-secret",
        "access_expires": timedelta(minutes=5),
        "refresh_secret": "test-refresh-secret",
        "refresh_expires": timedelta(days=1),
    }
    options.update(overrides)
    return TokenService(**options)


@pytest.fixture
def tokens() -> TokenService:
    return make_token_service()


@pytest.fixture
def client(mongo, tokens):
    from main import app

    app.dependency_overrides[get_token_service] = lambda: tokens
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
