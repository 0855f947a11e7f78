"""
Application configuration management.

This module handles all configuration loading from environment variables,
provides validation, and sets up proper defaults for different environments.
"""

import warnings
from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_JWT_SECRET = "dev-secret-change-this-in-production"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    app_name: str = "BMVT API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"  # nosec: B104 - Intentional for containerized deployment
    port: int = 4000

    # Database (DATABASE_URL wins over the discrete MySQL settings)
    database_url: str | None = None
    db_host: str = "localhost"
    db_port: int = 3306
    db_user: str = "root"
    db_password: str = "changeme"
    db_name: str = "bmvt_db"

    # Database Connection Pool Settings
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_timeout: int = 30
    db_pool_recycle: int = 1800  # Recycle connections after 30 minutes
    db_pool_pre_ping: bool = True
    db_connect_timeout: int = 10

    # JWT Authentication
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 7 * 24 * 60  # 7 days

    # File Upload Configuration
    upload_directory: str = "uploads"
    max_file_size_mb: int = 10
    max_chat_files: int = 10
    allowed_image_extensions: list = [".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic"]

    # CORS
    allowed_origins: list = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    allowed_origin_regex: str | None = r"https://.*\.vercel\.app"
    allowed_methods: list = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    allowed_headers: list = ["Content-Type", "Authorization", "x-access-token"]

    # Chat
    chat_heartbeat_seconds: float = 25.0

    # Logging
    log_directory: str = "logs"

    @field_validator("jwt_secret_key")
    def validate_jwt_secret(cls, v):
        """Warn if using default secret key."""
        if v == DEFAULT_JWT_SECRET:
            warnings.warn(
                "Using default JWT secret key! This is insecure for production. "
                "Set JWT_SECRET_KEY environment variable to a secure random string. "
                "Generate one with: openssl rand -hex 32",
                UserWarning,
                stacklevel=3,
            )
        return v

    @field_validator("environment")
    def validate_environment(cls, v):
        """Validate environment setting."""
        valid_envs = ["development", "testing", "staging", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    def get_database_url(self) -> str:
        """Return DATABASE_URL if set, otherwise build the MySQL URL."""
        if self.database_url:
            return self.database_url

        # URL encode credentials to handle special characters like @
        encoded_pwd = quote_plus(self.db_password)
        encoded_user = quote_plus(self.db_user)

        return (
            f"mysql+pymysql://{encoded_user}:{encoded_pwd}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def max_file_size_bytes(self) -> int:
        """Get max individual file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration object
    """
    return Settings()


# Export commonly used settings
settings = get_settings()
