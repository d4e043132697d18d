"""Request dependencies: authenticated user, role gates and service providers."""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.errors import AppError, ErrorKind
from app.core.security import TokenService
from app.db.tables import Tables
from app.models.user import Role
from app.services.auth_service import AuthService, UserRepository
from app.services.image_storage import ImageStorage
from app.services.problem_service import ProblemService
from app.services.product_service import ProductService
from app.services.progress_service import ProgressService


# JWT bearer token scheme; missing headers are reported by get_current_user
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def get_tables(request: Request) -> Tables:
    return request.app.state.tables


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentUser:
    """
    Dependency to get the current authenticated user from the access token.

    Usage:
        @router.get("/protected")
        def protected_route(current_user: CurrentUser = Depends(get_current_user)):
            return {"user_id": current_user.user_id}
    """
    if credentials is None or not credentials.credentials:
        raise AppError(ErrorKind.UNAUTHENTICATED, "Access token required")

    claims = tokens.verify_access_token(credentials.credentials)
    if not claims.get("userId") or not claims.get("email"):
        raise AppError(ErrorKind.INVALID_TOKEN, "Invalid authentication credentials")

    return CurrentUser(
        user_id=claims["userId"],
        email=claims["email"],
        role=claims.get("role", Role.USER.value),
    )


def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Dependency to ensure the user carries the admin role."""
    if not current_user.is_admin:
        raise AppError(ErrorKind.FORBIDDEN, "Admin access required")
    return current_user


def require_role(*roles: str):
    """Dependency factory accepting any of ``roles``."""
    allowed = [r.value if isinstance(r, Role) else r for r in roles]

    def dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            raise AppError(
                ErrorKind.FORBIDDEN,
                f"Access denied. Required role(s): {', '.join(allowed)}",
            )
        return current_user

    return dependency


def get_auth_service(request: Request, tables: Tables = Depends(get_tables)) -> AuthService:
    state = request.app.state
    return AuthService(UserRepository(tables.users), state.tokens, state.hasher)


def get_problem_service(tables: Tables = Depends(get_tables)) -> ProblemService:
    return ProblemService(tables.problems)


def get_progress_service(tables: Tables = Depends(get_tables)) -> ProgressService:
    return ProgressService(tables.progress)


def get_product_service(tables: Tables = Depends(get_tables)) -> ProductService:
    return ProductService(tables.products)


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage
