"""Security utilities for JWT and password hashing."""
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import Settings
from app.core.errors import AppError, ErrorKind


ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _truncate_for_bcrypt(password: str) -> str:
    """Truncate password to bcrypt's 72-byte limit.

    Bcrypt rejects inputs longer than 72 bytes. We truncate on the UTF-8
    encoded bytes and decode with 'ignore' to avoid splitting multi-byte
    sequences.
    """
    if not isinstance(password, str):
        return password
    b = password.encode("utf-8")[:72]
    return b.decode("utf-8", "ignore")


class PasswordHasher:
    """Salted bcrypt hashing through passlib."""

    def __init__(self, rounds: int = 10):
        self.context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self.context.hash(_truncate_for_bcrypt(password))

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return self.context.verify(_truncate_for_bcrypt(password), hashed)
        except ValueError:
            # Stored value is not a recognizable hash
            return False


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    """Issues and verifies access/refresh JWTs, each class signed with its own secret."""

    def __init__(self, settings: Settings):
        self.algorithm = settings.JWT_ALGORITHM
        self.access_secret = settings.JWT_SECRET
        self.refresh_secret = settings.JWT_REFRESH_SECRET
        self.access_lifetime = settings.access_token_lifetime
        self.refresh_lifetime = settings.refresh_token_lifetime

    def _encode(self, user_id: str, email: str, role: str, token_type: str) -> str:
        now = datetime.now(timezone.utc)
        if token_type == REFRESH_TOKEN_TYPE:
            secret, lifetime = self.refresh_secret, self.refresh_lifetime
        else:
            secret, lifetime = self.access_secret, self.access_lifetime
        claims = {
            "userId": user_id,
            "email": email,
            "role": role,
            "type": token_type,
            "iat": now,
            "exp": now + lifetime,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, secret, algorithm=self.algorithm)

    def issue_token_pair(self, user_id: str, email: str, role: str) -> TokenPair:
        return TokenPair(
            access_token=self._encode(user_id, email, role, ACCESS_TOKEN_TYPE),
            refresh_token=self._encode(user_id, email, role, REFRESH_TOKEN_TYPE),
        )

    def _decode(self, token: str, secret: str, expected_type: str, label: str) -> dict:
        try:
            claims = jwt.decode(token, secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise AppError(ErrorKind.EXPIRED_TOKEN, f"{label} expired")
        except JWTError:
            raise AppError(ErrorKind.INVALID_TOKEN, f"Invalid {label.lower()}")

        if claims.get("type") != expected_type:
            raise AppError(ErrorKind.WRONG_TOKEN_TYPE, "Invalid token type")
        return claims

    def verify_refresh_token(self, token: str) -> dict:
        """Decode a refresh token; raises AppError on expiry, wrong type or bad signature."""
        return self._decode(token, self.refresh_secret, REFRESH_TOKEN_TYPE, "Refresh token")

    def verify_access_token(self, token: str) -> dict:
        return self._decode(token, self.access_secret, ACCESS_TOKEN_TYPE, "Access token")
