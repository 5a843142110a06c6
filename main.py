import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.connections import mongo_lifespan
from app.api.user import router as user_router
from app.utils.config import settings
from app.utils.errors import ApiError, InternalError, ValidationError, error_for_status
from app.utils.logging import setup_logging


setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


app = FastAPI(title="User Accounts (Mongo)", version="0.1.0", lifespan=mongo_lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(error: ApiError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{"loc": list(err.get("loc", [])), "msg": err.get("msg")} for err in exc.errors()]
    return _error_response(ValidationError("Invalid request body", errors))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(error_for_status(exc.status_code, str(exc.detail)))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(InternalError())


@app.get("/")
def index() -> dict:
    return {"message": "API is running..."}


app.include_router(user_router, prefix="/api/v1/users")
