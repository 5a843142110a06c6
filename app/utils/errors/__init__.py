from typing import Any


class ApiError(Exception):
    """Error raised at the operation boundary and rendered as the error envelope."""

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None, errors: list[Any] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "statusCode": self.status_code,
            "message": self.message,
            "success": False,
            "errors": self.errors,
        }


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class UnauthorizedError(ApiError):
    status_code = 401
    default_message = "Unauthorized request"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class ConflictError(ApiError):
    status_code = 409
    default_message = "Conflict"


class InternalError(ApiError):
    status_code = 500


def error_for_status(status_code: int, message: str, errors: list[Any] | None = None) -> ApiError:
    """Build an `ApiError` for an arbitrary status code (framework-raised errors)."""
    error = ApiError(message, errors)
    error.status_code = status_code
    return error


__all__ = [
    "ApiError",
    "ValidationError",
    "UnauthorizedError",
    "NotFoundError",
    "ConflictError",
    "InternalError",
    "error_for_status",
]
