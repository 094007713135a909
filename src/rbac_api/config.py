"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, RedisDsn, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Minimum entropy for secrets (measured by character diversity)
MIN_SECRET_UNIQUE_CHARS = 16


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "RBAC Admin API"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # Database (required - no default for security)
    database_url: str = Field(
        description="PostgreSQL connection URL. Must be set via environment variable."
    )
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Redis (optional - response caching is disabled when unset)
    redis_url: RedisDsn | None = None

    # Cache TTL settings (in seconds)
    cache_ttl_dashboard: int = 300  # 5 minutes

    # Text generation service
    llm_provider: Literal["gemini", "openai"] = "gemini"
    llm_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("llm_api_key", "google_gemini_api_key"),
    )
    llm_model: str = "gemini-1.5-flash"
    llm_base_url: str | None = None
    llm_temperature: float = 0.1  # Low temperature for consistent JSON replies
    llm_max_output_tokens: int = 2048
    llm_timeout_seconds: float = 30.0
    llm_max_retries: int = 3
    llm_retry_base_delay: float = 1.0
    llm_retry_max_delay: float = 10.0

    # Natural-language commands
    ai_confidence_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    context_cache_ttl_seconds: int = 30

    # Security - JWT issued by the hosted auth provider
    auth_enabled: bool = False
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"

    # CORS settings
    cors_origins: str = "http://localhost:3000"  # Comma-separated list

    # Rate limiting settings (requests per minute)
    rate_limit_enabled: bool = True
    rate_limit_default: int = 100
    rate_limit_ai: int = 20

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Validate settings for security requirements."""
        # Security: Prevent debug mode in production
        if self.environment == "production" and self.debug:
            raise ValueError(
                "DEBUG mode cannot be enabled in production environment. "
                "This would expose API documentation and detailed error messages."
            )

        url = self.database_url
        if not url.startswith(("postgresql://", "postgres://", "postgresql+asyncpg://", "sqlite")):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL URL starting with 'postgresql://' "
                "or an sqlite+aiosqlite URL for local use"
            )
        if self.environment == "production" and url.startswith("sqlite"):
            raise ValueError("SQLite cannot be used in production environment")

        if self.auth_enabled and len(self.jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters when AUTH_ENABLED is set")

        # Security: Validate JWT secret has sufficient entropy
        if self.environment == "production" and self.auth_enabled:
            if len(set(self.jwt_secret)) < MIN_SECRET_UNIQUE_CHARS:
                raise ValueError(
                    f"JWT_SECRET must contain at least {MIN_SECRET_UNIQUE_CHARS} unique characters "
                    "for sufficient entropy. Use a cryptographically random value."
                )

        return self

    @property
    def async_database_url(self) -> str:
        """Get async database URL for SQLAlchemy.

        PostgreSQL URLs are switched to asyncpg and sslmode is converted to
        the ssl parameter asyncpg understands. SQLite URLs are used as-is.
        """
        url = self.database_url
        if url.startswith("sqlite"):
            return url
        url = url.replace("postgres://", "postgresql://", 1)
        if not url.startswith("postgresql+asyncpg://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        # Convert sslmode to ssl for asyncpg compatibility
        url = url.replace("sslmode=", "ssl=")
        return url

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite."""
        return self.database_url.startswith("sqlite")

    @property
    def ai_configured(self) -> bool:
        """Whether an API key for the text generation service is set."""
        return bool(self.llm_api_key and self.llm_api_key.strip())

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
