from app.utils.config import Settings
from app.utils.errors import ConflictError, UnauthorizedError, error_for_status
from app.utils.response import ApiResponse


def test_cookie_secure_only_in_production() -> None:
    assert Settings(environment="production").cookie_secure is True
    assert Settings(environment="local").cookie_secure is False


def test_mongo_uri_includes_credentials_when_set() -> None:
    settings = Settings(mongo_user="svc", mongo_password="pw", mongo_host="cluster.example.net", mongo_db="accounts")
    assert settings.mongo_uri.startswith("mongodb+srv://svc:pw@cluster.example.net/accounts?")


def test_mongo_uri_without_credentials() -> None:
    settings = Settings(mongo_scheme="mongodb", mongo_host="localhost:27017", mongo_db="accounts")
    assert settings.mongo_uri.startswith("mongodb://localhost:27017/accounts?")


def test_success_envelope_serializes_camel_case() -> None:
    body = ApiResponse(status_code=201, data={"id": "1"}, message="created").model_dump(by_alias=True)
    assert body == {"statusCode": 201, "data": {"id": "1"}, "message": "created", "success": True}


def test_error_envelope() -> None:
    assert ConflictError("taken").to_dict() == {
        "statusCode": 409,
        "message": "taken",
        "success": False,
        "errors": [],
    }
    assert UnauthorizedError().message == "Unauthorized request"
    assert error_for_status(404, "Not Found").to_dict()["statusCode"] == 404
