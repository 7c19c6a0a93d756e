"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List

_DEFAULT_JWT_SECRET = "dev-insecure-key-change-me"


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Uses Pydantic for configuration validation, preventing
    common security issues like wildcard CORS.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./docward.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(
        default=5,
        description="Number of persistent database connections"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Extra connections allowed during traffic bursts"
    )
    db_pool_timeout: int = Field(
        default=30,
        description="Seconds to wait for a connection from the pool before raising"
    )
    db_pool_recycle: int = Field(
        default=1800,
        description="Seconds before a connection is recycled (prevents stale connections)"
    )

    # Identity
    # Tokens are minted by the identity provider and signed with this shared secret.
    jwt_secret_key: str = Field(
        default=_DEFAULT_JWT_SECRET,
        description="Secret used to verify identity-provider tokens (override in production)"
    )
    jwt_algorithm: str = Field(default="HS256")

    # Real-time collaboration service (session grants)
    collaboration_api_url: str = Field(
        default="https://api.liveblocks.io",
        description="Base URL of the collaboration service"
    )
    collaboration_secret_key: str = Field(
        default="",
        description="Server-side secret for the collaboration service"
    )
    collaboration_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for a single session-authorization request"
    )

    # Access control
    # When True only the owner may delete a document. When False any principal
    # with editor capability through owner/organization/permission rules may.
    delete_requires_owner: bool = Field(
        default=True,
        description="Restrict document deletion to the owner"
    )
    share_link_token_bytes: int = Field(
        default=32,
        ge=16,
        description="Random bytes per share-link token"
    )

    # Rate Limiting
    # RATE_LIMIT_PER_MINUTE: max requests per client per minute. 0 disables the limiter.
    rate_limit_per_minute: int = Field(
        default=120,
        description="Maximum requests per client per minute"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        # SECURITY: Prevent wildcard CORS
        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ('json', 'text'):
            raise ValueError("Invalid log format. Must be 'json' or 'text'")
        return v_lower

    @field_validator('jwt_algorithm')
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        # token_factory only implements HMAC-SHA256
        if v.upper() != 'HS256':
            raise ValueError("Only HS256 identity tokens are supported")
        return 'HS256'

    @field_validator('collaboration_api_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip('/')

    def uses_default_jwt_secret(self) -> bool:
        return self.jwt_secret_key == _DEFAULT_JWT_SECRET

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if security-critical settings use insecure defaults.
        In development, logs warnings but allows startup.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

        if self.uses_default_jwt_secret():
            errors.append(
                "JWT_SECRET_KEY is using the default insecure value. "
                "Set it to the identity provider's signing secret."
            )

        if not self.collaboration_secret_key:
            errors.append(
                "COLLABORATION_SECRET_KEY is empty. "
                "Session authorization cannot reach the collaboration service."
            )

        # Check for localhost CORS origins
        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if errors:
            if self.environment == Environment.PRODUCTION:
                raise ConfigurationError(
                    "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
                )
            # In development, just return — main.py will log warnings
            return

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        # Allow reading from environment variables with different case
        case_sensitive = False


# Global settings instance
settings = Settings()
