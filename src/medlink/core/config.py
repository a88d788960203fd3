"""Application Configuration Module.

All configuration is loaded from environment variables via pydantic-settings.

Environment file loading priority:
1. .env (base defaults)
2. .env.{APP_ENV} (e.g. .env.dev, .env.prod) overrides the base file
3. Environment variables always override file values
"""
import os
import warnings
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_SUFFIXES = {
    "dev": "dev",
    "development": "dev",
    "prod": "prod",
    "production": "prod",
    "staging": "staging",
    "test": "test",
}


def _get_env_file() -> str | tuple[str, ...]:
    """Return the env file(s) to load, base file first."""
    app_env = os.getenv("APP_ENV", "").lower()
    suffix = _ENV_SUFFIXES.get(app_env, app_env)

    env_files: list[str] = []
    if Path(".env").exists():
        env_files.append(".env")
    if suffix and Path(f".env.{suffix}").exists():
        env_files.append(f".env.{suffix}")

    if env_files:
        return tuple(env_files)
    return ".env"


class Settings(BaseSettings):
    """MedLink portal settings.

    Set ``APP_ENV=dev`` to pick up ``.env.dev`` on top of ``.env``.
    """

    model_config = SettingsConfigDict(
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Application Settings
    # ========================================
    APP_NAME: str = Field(
        default="medlink-portal-api",
        description="Application name used in logging"
    )
    APP_VERSION: str = Field(default="1.0.0", description="Semantic version")
    APP_ENV: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment"
    )
    DEBUG: bool = Field(default=False, description="Never enable in production")

    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=8000, ge=1, le=65535, description="Server port")
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )

    # ========================================
    # Database Configuration (PostgreSQL)
    # ========================================
    DATABASE_URL: str = Field(
        default="",
        description="SQLAlchemy async URL (postgresql+asyncpg://...). Required in production."
    )
    DATABASE_POOL_SIZE: int = Field(default=5, ge=1, le=100)
    DATABASE_MAX_OVERFLOW: int = Field(default=10, ge=0)
    DATABASE_POOL_TIMEOUT: int = Field(
        default=30,
        ge=1,
        description="Timeout for getting a connection from the pool (seconds)"
    )
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements to logs")

    # ========================================
    # Session Token Verification
    # ========================================
    SECRET_KEY: str = Field(
        default="change-me-in-production-use-strong-random-key",
        min_length=32,
        description="Shared secret used by the session provider to sign JWTs"
    )
    ALGORITHM: str = Field(default="HS256", description="JWT signing algorithm")

    # ========================================
    # CORS Configuration
    # ========================================
    CORS_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed origins"
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(
        default=False,
        description="Must be False when CORS_ORIGINS is '*'"
    )
    CORS_ALLOW_METHODS: str = Field(default="GET,POST,PUT,DELETE,OPTIONS,PATCH")
    CORS_ALLOW_HEADERS: str = Field(default="*")

    # ========================================
    # Uploads & Blob Storage
    # ========================================
    MAX_FILE_SIZE_MB: int = Field(default=10, ge=1, le=100)
    STORAGE_BACKEND: Literal["local", "s3"] = Field(
        default="local",
        description="'local' for filesystem, 's3' for AWS S3"
    )
    BLOB_STORAGE_PATH: str = Field(default="./blob_storage")
    BLOB_BASE_URL: str = Field(
        default="/api/v1/files/download",
        description="Base URL for serving locally stored blobs"
    )
    AWS_ACCESS_KEY_ID: str = Field(default="")
    AWS_SECRET_ACCESS_KEY: str = Field(default="")
    AWS_REGION: str = Field(default="us-east-1")
    AWS_S3_BUCKET: str = Field(default="")
    AWS_S3_PREFIX: str = Field(
        default="",
        description="Optional prefix for S3 object keys"
    )
    SHARE_LINK_EXPIRY_SECONDS: int = Field(
        default=300,
        ge=30,
        le=86400,
        description="Lifetime of shared prescription download links"
    )

    # ========================================
    # Google Gemini Configuration
    # ========================================
    GOOGLE_API_KEY: str = Field(default="", description="Google AI Studio API key")
    GEMINI_MODEL: str = Field(default="gemini-2.5-flash")
    GEMINI_MAX_RETRIES: int = Field(
        default=0,
        ge=0,
        le=10,
        description="Extra attempts on transient network failures; 0 disables retrying"
    )
    GEMINI_RETRY_DELAY: float = Field(
        default=1.0,
        ge=0.1,
        description="Initial delay between retries (seconds)"
    )
    GEMINI_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=2.0)
    CHATBOT_MAX_TOKENS: int = Field(default=1024, ge=100)
    SYMPTOM_CHECKER_MAX_TOKENS: int = Field(default=2048, ge=100)

    # ========================================
    # Mapbox Geocoding
    # ========================================
    MAPBOX_ACCESS_TOKEN: str = Field(default="")
    MAPBOX_BASE_URL: str = Field(
        default="https://api.mapbox.com/geocoding/v5/mapbox.places"
    )
    MAPBOX_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)

    # ========================================
    # Computed Properties
    # ========================================
    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def cors_methods_list(self) -> list[str]:
        return [method.strip() for method in self.CORS_ALLOW_METHODS.split(",")]

    @property
    def cors_headers_list(self) -> list[str]:
        return [header.strip() for header in self.CORS_ALLOW_HEADERS.split(",")]

    @property
    def max_file_size_bytes(self) -> int:
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    # ========================================
    # Validators
    # ========================================
    @field_validator("GOOGLE_API_KEY")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Warn if API key is not set."""
        if not v:
            warnings.warn(
                "GOOGLE_API_KEY is not set. Chatbot and symptom checker will return fallbacks.",
                UserWarning,
                stacklevel=2,
            )
        return v

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v:
            warnings.warn(
                "DATABASE_URL is not set. The application will fail on first DB access.",
                UserWarning,
                stacklevel=2,
            )
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Reject unsafe combinations, and anything insecure in production."""
        if self.CORS_ORIGINS.strip() == "*" and self.CORS_ALLOW_CREDENTIALS:
            raise ValueError(
                "CORS_ALLOW_CREDENTIALS cannot be True when CORS_ORIGINS is '*'. "
                "Set CORS_ORIGINS to an explicit comma-separated list of origins."
            )

        if self.is_production:
            if self.DEBUG:
                raise ValueError("DEBUG must be False in production")
            if "change-me" in self.SECRET_KEY.lower():
                raise ValueError("SECRET_KEY must be changed in production")
            if not self.DATABASE_URL:
                raise ValueError("DATABASE_URL must be set in production")
            if self.STORAGE_BACKEND == "s3" and not self.AWS_S3_BUCKET:
                raise ValueError("AWS_S3_BUCKET is required when STORAGE_BACKEND is 's3'")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance.

    Tests override values by patching the environment and calling
    ``get_settings.cache_clear()``.
    """
    return Settings()
