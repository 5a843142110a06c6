from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, ConfigDict, Field

from app.models.user import PublicUser
from app.services import session
from app.services.auth import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    TokenPair,
    TokenService,
    get_current_user,
    get_token_service,
)
from app.utils.config import settings
from app.utils.response import ApiResponse


router = APIRouter()


def _cookie_options() -> dict:
    return {"httponly": True, "secure": settings.cookie_secure, "samesite": "lax"}


def _set_session_cookies(response: Response, tokens: TokenPair) -> None:
    response.set_cookie(ACCESS_COOKIE, tokens.access_token, **_cookie_options())
    response.set_cookie(REFRESH_COOKIE, tokens.refresh_token, **_cookie_options())


def _clear_session_cookies(response: Response) -> None:
    response.delete_cookie(ACCESS_COOKIE, **_cookie_options())
    response.delete_cookie(REFRESH_COOKIE, **_cookie_options())


class RegisterBody(BaseModel):
    roll_no: str | None = None
    name: str | None = None
    email_id: str | None = None
    password: str | None = None

@router.post("/register", status_code=201, response_model=ApiResponse)
def register(body: RegisterBody) -> ApiResponse:
    """PUBLIC: Create an account; returns the public view only."""
    user = session.register(body.roll_no, body.name, body.email_id, body.password)
    return ApiResponse(status_code=201, data=user.model_dump(mode="json"), message="User registered successfully")


class LoginBody(BaseModel):
    email_id: str | None = None
    roll_no: str | None = None
    password: str | None = None

@router.post("/login", response_model=ApiResponse)
def login(
    body: LoginBody,
    response: Response,
    tokens: TokenService = Depends(get_token_service),
) -> ApiResponse:
    """PUBLIC: Verify credentials, start a session and set both cookies."""
    result = session.login(body.email_id, body.roll_no, body.password, tokens)
    _set_session_cookies(response, result.tokens)
    data = {
        "user": result.user.model_dump(mode="json"),
        "accessToken": result.tokens.access_token,
        "refreshToken": result.tokens.refresh_token,
    }
    return ApiResponse(status_code=200, data=data, message="User logged in successfully")


class RefreshBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str | None = Field(default=None, alias="refreshToken")

@router.post("/refresh-token", response_model=ApiResponse)
def refresh_token(
    request: Request,
    response: Response,
    body: RefreshBody | None = None,
    tokens: TokenService = Depends(get_token_service),
) -> ApiResponse:
    """PUBLIC: Rotate the refresh token taken from the cookie, else the body."""
    incoming = request.cookies.get(REFRESH_COOKIE) or (body.refresh_token if body else None)
    pair = session.refresh_access_token(incoming, tokens)
    _set_session_cookies(response, pair)
    data = {"accessToken": pair.access_token, "refreshToken": pair.refresh_token}
    return ApiResponse(status_code=200, data=data, message="Access token refreshed")


@router.post("/logout", response_model=ApiResponse)
def logout(response: Response, current_user: PublicUser = Depends(get_current_user)) -> ApiResponse:
    """PROTECTED: Forget the stored refresh token and clear cookies."""
    session.logout(current_user.id)
    _clear_session_cookies(response)
    return ApiResponse(status_code=200, data={}, message="User logged out successfully")


@router.get("/current-user", response_model=ApiResponse)
def current_user(current_user: PublicUser = Depends(get_current_user)) -> ApiResponse:
    """PROTECTED: Return the caller's public view."""
    user = session.get_current_user(current_user)
    return ApiResponse(status_code=200, data=user.model_dump(mode="json"), message="User details fetched successfully")


class UpdateAccountBody(BaseModel):
    name: str | None = None
    email_id: str | None = None

@router.patch("/update-account", response_model=ApiResponse)
def update_account(body: UpdateAccountBody, current_user: PublicUser = Depends(get_current_user)) -> ApiResponse:
    """PROTECTED: Partially update name and/or email."""
    user = session.update_profile(current_user.id, name=body.name, email_id=body.email_id)
    return ApiResponse(status_code=200, data=user.model_dump(mode="json"), message="User details updated successfully")


class ChangePasswordBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_password: str | None = Field(default=None, alias="oldPassword")
    new_password: str | None = Field(default=None, alias="newPassword")

@router.post("/change-password", response_model=ApiResponse)
def change_password(body: ChangePasswordBody, current_user: PublicUser = Depends(get_current_user)) -> ApiResponse:
    """PROTECTED: Replace the password after checking the old one."""
    session.change_password(current_user.id, body.old_password, body.new_password)
    return ApiResponse(status_code=200, data={}, message="Password updated successfully")
