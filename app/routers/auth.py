"""
Authentication API endpoints for registration, login, logout and profiles.
Sessions travel in an http-only cookie; every response uses the auth envelope.
"""

from fastapi import APIRouter, Depends, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from app.config import settings
from app.models.user import User
from app.services.auth import AuthService
from app.schemas.auth import LoginRequest, AuthResponse, AuthUserData, AuthIdentity
from app.schemas.error import get_error_responses
from app.schemas.user import UserCreate, ProfileUpdate, UserResponse
from app.utils.dependencies import get_auth_service, get_current_identity
from app.utils.exceptions import APIException
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _user_envelope(user: User, message: str) -> AuthResponse:
    return AuthResponse(
        success=True,
        data=AuthUserData(user=UserResponse.model_validate(user.to_dict())),
        message=message
    )


def _error_envelope(exc: APIException, message: str) -> JSONResponse:
    """Failure envelope carrying the exception's status code."""
    body = AuthResponse(success=False, error=exc.detail, message=message)
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(body, by_alias=True),
        headers=exc.headers
    )


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.access_token_expire_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/"
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a new ACTIVE account with role USER",
    responses=get_error_responses(409, 422)
)
async def register(
    user_data: UserCreate,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Register a new user.

    Returns:
        Envelope with the created user, or a failure envelope (409 on duplicate email)
    """
    try:
        user = await auth_service.register(user_data)
        return _user_envelope(user, "User registered successfully")
    except APIException as e:
        return _error_envelope(e, "Registration failed")


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password; sets the session cookie",
    responses=get_error_responses(401, 422)
)
async def login(
    login_data: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Authenticate user and set the http-only session cookie.

    Returns:
        Envelope with the user, or a 401 failure envelope
    """
    try:
        user, access_token = await auth_service.login(
            email=login_data.email,
            password=login_data.password
        )
    except APIException as e:
        return _error_envelope(e, "Login failed")

    _set_session_cookie(response, access_token)
    return _user_envelope(user, "Login successful")


@router.post(
    "/logout",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User logout",
    description="Clear the session cookie"
)
async def logout(response: Response) -> AuthResponse:
    """Clear the session cookie. Works with or without a valid session."""
    response.delete_cookie(
        key=settings.cookie_name,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax"
    )
    return AuthResponse(success=True, message="Logout successful")


@router.get(
    "/me",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Get the account behind the current session",
    responses=get_error_responses(401, 404)
)
async def get_current_user_info(
    identity: AuthIdentity = Depends(get_current_identity),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Get current authenticated user information."""
    try:
        user = await auth_service.get_current_user(identity.id)
    except APIException as e:
        return _error_envelope(e, "User not found")

    return AuthResponse(
        success=True,
        data=AuthUserData(user=UserResponse.model_validate(user.to_dict()))
    )


@router.patch(
    "/profile",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Update profile",
    description="Partially update first name, last name and phone",
    responses=get_error_responses(401, 404, 422)
)
async def update_profile(
    profile_data: ProfileUpdate,
    identity: AuthIdentity = Depends(get_current_identity),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Merge the provided profile fields into the current account."""
    try:
        user = await auth_service.update_profile(identity.id, profile_data)
        return _user_envelope(user, "Profile updated successfully")
    except APIException as e:
        return _error_envelope(e, "Profile update failed")
