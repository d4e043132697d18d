"""Authentication routes."""
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from app.core.deps import CurrentUser, get_auth_service, get_current_user, require_admin
from app.core.errors import AppError, ErrorKind
from app.services.auth_service import AuthResult, AuthService


router = APIRouter(prefix="/api/auth", tags=["Authentication"])


# Request schemas
class CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class SignupRequest(CamelRequest):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)


class LoginRequest(CamelRequest):
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequest(CamelRequest):
    refresh_token: Optional[str] = None


class ProfileUpdateRequest(CamelRequest):
    name: str = Field(min_length=1)


class ChangePasswordRequest(CamelRequest):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)


def _auth_response(message: str, result: AuthResult) -> dict:
    return {
        "success": True,
        "message": message,
        "accessToken": result.access_token,
        "refreshToken": result.refresh_token,
        "user": result.user.to_json(),
    }


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(request: SignupRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Register a new user.

    - The first account in an empty store is created as admin
    - Returns an access/refresh token pair
    """
    result = auth.signup(request.email, request.password, request.name)
    return _auth_response("User created successfully", result)


@router.post("/login")
def login(request: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """Login with email and password; rotates the stored refresh token."""
    result = auth.login(request.email, request.password)
    return _auth_response("Login successful", result)


@router.post("/refresh")
def refresh(request: RefreshRequest, auth: AuthService = Depends(get_auth_service)):
    """Exchange the current refresh token for a new token pair."""
    if not request.refresh_token:
        raise AppError(ErrorKind.VALIDATION, "Refresh token is required")

    try:
        pair = auth.refresh_tokens(request.refresh_token)
    except AppError as e:
        if e.kind == ErrorKind.EXPIRED_TOKEN:
            raise AppError(ErrorKind.EXPIRED_TOKEN, "Refresh token expired. Please login again.")
        if e.kind == ErrorKind.WRONG_TOKEN_TYPE:
            raise AppError(ErrorKind.INVALID_TOKEN, "Invalid refresh token")
        raise

    return {
        "success": True,
        "message": "Tokens refreshed successfully",
        "accessToken": pair.access_token,
        "refreshToken": pair.refresh_token,
    }


@router.get("/me")
def get_me(
    current_user: CurrentUser = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Get current authenticated user information.

    Protected endpoint - requires valid JWT token.
    """
    user = auth.get_user(current_user.email)
    return {"success": True, "user": user.to_json()}


@router.put("/profile")
def update_profile(
    request: ProfileUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    user = auth.update_profile(current_user.email, request.name)
    return {"success": True, "message": "Profile updated successfully", "user": user.to_json()}


@router.put("/change-password")
def change_password(
    request: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    auth.change_password(current_user.email, request.current_password, request.new_password)
    return {"success": True, "message": "Password changed successfully"}


@router.post("/logout")
def logout(current_user: CurrentUser = Depends(get_current_user)):
    """Stateless logout; the client discards its tokens."""
    return {"success": True, "message": "Logout successful"}


@router.post("/create-admin", status_code=status.HTTP_201_CREATED)
def create_admin(
    request: SignupRequest,
    current_user: CurrentUser = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
):
    """Create another admin account. Admin only."""
    result = auth.create_admin(request.email, request.password, request.name, current_user.role)
    return _auth_response("Admin user created successfully", result)
