"""
Application Configuration
Environment variables and settings management
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    ENVIRONMENT: str = Field(default="development", description="Application environment")
    DEBUG: bool = Field(default=False, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # Database
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./catalog.db", description="Database URL")
    DB_POOL_SIZE: int = Field(default=10, description="Database connection pool size")
    DB_MAX_OVERFLOW: int = Field(default=20, description="Database max overflow connections")
    DB_POOL_TIMEOUT: int = Field(default=30, description="Database pool timeout in seconds")
    DB_POOL_RECYCLE: int = Field(default=3600, description="Database pool recycle time in seconds")

    # JWT Authentication
    JWT_SECRET_KEY: str = Field(
        default="change-me-in-production-this-key-must-be-at-least-32-chars",
        description="JWT secret key",
    )
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24, description="JWT access token expiration")

    # Token issuers (local is the only strategy shipped)
    AUTH_ACTIVE_ISSUER: str = Field(default="local", description="Active token validation strategy")
    AUTH_TRUSTED_ISSUERS: str = Field(default="catalog-local", description="Comma separated accepted token issuers")
    AUTH_LOCAL_ISSUER: str = Field(default="catalog-local", description="Issuer claim for locally minted tokens")

    # Access control
    GUARD_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        gt=0,
        description="Deadline for the access-control pipeline; exceeding it denies the request",
    )

    # Bootstrap admin
    BOOTSTRAP_ADMIN_EMAIL: str = Field(default="admin@catalog.local", description="Seeded admin email")
    BOOTSTRAP_ADMIN_PASSWORD: str = Field(default="Admin@12345", description="Seeded admin password")
    BOOTSTRAP_ADMIN_FULL_NAME: str = Field(default="System Administrator", description="Seeded admin name")

    # Security
    CORS_ORIGINS: str = Field(default="", description="Comma separated CORS allowed origins")

    @property
    def trusted_issuers(self) -> List[str]:
        return _split_csv(self.AUTH_TRUSTED_ISSUERS)

    @property
    def cors_origins(self) -> List[str]:
        return _split_csv(self.CORS_ORIGINS)

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value"""
        allowed = ["development", "staging", "production", "test"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }


# Create settings instance
settings = Settings()

# Derived settings
DATABASE_CONFIG = {
    "pool_size": settings.DB_POOL_SIZE,
    "max_overflow": settings.DB_MAX_OVERFLOW,
    "pool_timeout": settings.DB_POOL_TIMEOUT,
    "pool_recycle": settings.DB_POOL_RECYCLE,
    "pool_pre_ping": True,
    "echo": settings.ENVIRONMENT == "development" and settings.DEBUG,
}
