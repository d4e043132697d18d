"""Authentication service.

Every operation is a single stateless transition over one user record:
read it by email, check it, write it back with a full overwrite. Each user
holds exactly one live refresh token; issuing a new pair overwrites it, so a
rotated-away token is rejected even before it expires.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from app.core.errors import AppError, ErrorKind
from app.core.security import PasswordHasher, TokenPair, TokenService
from app.db.store import DocumentTable, ItemExists
from app.models.base import utc_now_iso
from app.models.user import PublicUser, Role, UserRecord
from app.utils.ids import generate_id

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
INVALID_REFRESH_MESSAGE = "Invalid refresh token"
USER_NOT_FOUND_MESSAGE = "User not found"


class UserRepository:
    """Pass-through adapter over the users table (keyed by email)."""

    def __init__(self, table: DocumentTable):
        self.table = table

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        item = self.table.get(email)
        return UserRecord.from_item(item) if item else None

    def create(self, user: UserRecord) -> None:
        try:
            self.table.put(user.to_item(), if_absent=True)
        except ItemExists:
            raise AppError(ErrorKind.DUPLICATE_EMAIL, DUPLICATE_EMAIL_MESSAGE, email=user.email)

    def save(self, user: UserRecord) -> None:
        self.table.put(user.to_item())

    def any_exist(self) -> bool:
        return self.table.exists_any()


@dataclass
class AuthResult:
    access_token: str
    refresh_token: str
    user: PublicUser


class AuthService:
    def __init__(self, users: UserRepository, tokens: TokenService, hasher: PasswordHasher):
        self.users = users
        self.tokens = tokens
        self.hasher = hasher

    def _register(self, email: str, password: str, name: str, role: Role) -> AuthResult:
        if self.users.get_by_email(email):
            raise AppError(ErrorKind.DUPLICATE_EMAIL, DUPLICATE_EMAIL_MESSAGE, email=email)

        user_id = generate_id("user")
        pair = self.tokens.issue_token_pair(user_id, email, role.value)
        now = utc_now_iso()
        user = UserRecord(
            user_id=user_id,
            email=email,
            name=name,
            password=self.hasher.hash(password),
            role=role,
            refresh_token=pair.refresh_token,
            created_at=now,
            updated_at=now,
        )
        self.users.create(user)
        return AuthResult(pair.access_token, pair.refresh_token, user.public())

    def signup(self, email: str, password: str, name: str) -> AuthResult:
        """Create an account. The first user in an empty store becomes admin."""
        role = Role.USER if self.users.any_exist() else Role.ADMIN
        result = self._register(email, password, name, role)
        logger.info("User %s signed up with role %s", result.user.user_id, role.value)
        return result

    def create_admin(self, email: str, password: str, name: str, requester_role: str) -> AuthResult:
        if requester_role != Role.ADMIN.value:
            raise AppError(ErrorKind.FORBIDDEN, "Only admins can create admin users")
        result = self._register(email, password, name, Role.ADMIN)
        logger.info("Admin %s created", result.user.user_id)
        return result

    def _rotate(self, user: UserRecord) -> TokenPair:
        pair = self.tokens.issue_token_pair(user.user_id, user.email, user.role.value)
        user.refresh_token = pair.refresh_token
        user.updated_at = utc_now_iso()
        self.users.save(user)
        return pair

    def login(self, email: str, password: str) -> AuthResult:
        user = self.users.get_by_email(email)
        # Same error for unknown email and wrong password
        if not user or not self.hasher.verify(password, user.password):
            logger.warning("Failed login for %s", email)
            raise AppError(ErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

        pair = self._rotate(user)
        return AuthResult(pair.access_token, pair.refresh_token, user.public())

    def refresh_tokens(self, refresh_token: str) -> TokenPair:
        claims = self.tokens.verify_refresh_token(refresh_token)

        user = self.users.get_by_email(claims.get("email", ""))
        if not user:
            raise AppError(ErrorKind.INVALID_TOKEN, INVALID_REFRESH_MESSAGE)
        if user.refresh_token != refresh_token:
            logger.warning("Rejected superseded refresh token for user %s", user.user_id)
            raise AppError(ErrorKind.INVALID_TOKEN, INVALID_REFRESH_MESSAGE)

        return self._rotate(user)

    def get_user(self, email: str) -> PublicUser:
        user = self.users.get_by_email(email)
        if not user:
            raise AppError(ErrorKind.NOT_FOUND, USER_NOT_FOUND_MESSAGE)
        return user.public()

    def update_profile(self, email: str, name: str) -> PublicUser:
        user = self.users.get_by_email(email)
        if not user:
            raise AppError(ErrorKind.NOT_FOUND, USER_NOT_FOUND_MESSAGE)

        user.name = name
        user.updated_at = utc_now_iso()
        self.users.save(user)
        return user.public()

    def change_password(self, email: str, current_password: str, new_password: str) -> None:
        user = self.users.get_by_email(email)
        if not user:
            raise AppError(ErrorKind.NOT_FOUND, USER_NOT_FOUND_MESSAGE)
        if not self.hasher.verify(current_password, user.password):
            raise AppError(ErrorKind.WRONG_PASSWORD, "Current password is incorrect")

        user.password = self.hasher.hash(new_password)
        user.updated_at = utc_now_iso()
        self.users.save(user)
