"""Application settings and configuration.

This module defines all configuration options for the Threadline application.
Settings are loaded from environment variables with sensible defaults. A single
instance is built by :func:`threadline.main.create_app` and handed to the
components that need it.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Threadline", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./threadline.db",
        alias="DATABASE_URL",
    )
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT authentication settings
    jwt_secret: str = Field(default="tempSecret", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_expiration_in_seconds: int = Field(
        default=60 * 60 * 24 * 7,
        alias="JWT_EXPIRATION_IN_SECONDS",
    )

    # Argon2 password hashing cost
    password_time_cost: int = Field(default=3, alias="PASSWORD_TIME_COST")
    password_memory_cost: int = Field(default=65536, alias="PASSWORD_MEMORY_COST")
    password_parallelism: int = Field(default=4, alias="PASSWORD_PARALLELISM")

    # Pagination and feed assembly
    default_page_size: int = Field(default=10, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE")
    popularity_candidate_window: int = Field(
        default=500,
        alias="POPULARITY_CANDIDATE_WINDOW",
    )
    feed_source_timeout_seconds: float = Field(
        default=5.0,
        alias="FEED_SOURCE_TIMEOUT_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts async driver URLs to their synchronous counterparts for
        operations like Alembic migrations.
        """
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        if url.startswith("sqlite+aiosqlite"):
            return url.replace("sqlite+aiosqlite", "sqlite", 1)
        return url
