"""Application configuration with environment variables."""
import re
from datetime import timedelta
from typing import Optional

from pydantic_settings import BaseSettings


_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str) -> timedelta:
    """Parse a token lifetime such as ``"24h"``, ``"7d"`` or ``"900"`` (seconds)."""
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _DURATION_UNITS[unit])


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "DSA Tracker API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    PORT: int = 3000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # text or json

    # CORS (empty list allows every origin)
    CORS_ORIGINS: list[str] = []

    # JWT Settings
    JWT_SECRET: str = "your-super-secret-jwt-key-change-this-in-production"
    JWT_EXPIRES_IN: str = "24h"
    JWT_REFRESH_SECRET: str = "your-super-secret-refresh-key-change-this-in-production"
    JWT_REFRESH_EXPIRES_IN: str = "7d"
    JWT_ALGORITHM: str = "HS256"

    # Password hashing
    BCRYPT_ROUNDS: int = 10

    # Document store
    STORE_BACKEND: str = "dynamodb"  # dynamodb or memory
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    DYNAMODB_ENDPOINT_URL: Optional[str] = None

    USERS_TABLE_NAME: str = "Users"
    DSA_TABLE_NAME: str = "dsa-problems"
    USER_PROGRESS_TABLE_NAME: str = "user-progress"
    TECH_PRODUCTS_TABLE_NAME: str = "TechProducts"

    # Image uploads
    UPLOAD_DIR: str = "uploads/tech-products"
    UPLOAD_URL_PREFIX: str = "/uploads/tech-products"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB
    S3_BUCKET: Optional[str] = None
    S3_PREFIX: str = "tech-products/"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def access_token_lifetime(self) -> timedelta:
        return parse_duration(self.JWT_EXPIRES_IN)

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return parse_duration(self.JWT_REFRESH_EXPIRES_IN)


# Create global settings instance
settings = Settings()
