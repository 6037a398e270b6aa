"""Application settings and configuration.

This module defines all configuration options for the Quorum application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Quorum", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Argon2id cost parameters
    password_hash_time_cost: int = Field(default=3, alias="PASSWORD_HASH_TIME_COST")
    password_hash_memory_kib: int = Field(default=65536, alias="PASSWORD_HASH_MEMORY_KIB")
    password_hash_parallelism: int = Field(default=4, alias="PASSWORD_HASH_PARALLELISM")

    # Database configuration
    database_url: str = Field(default="sqlite:///./quorum.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")

    # Redis backs the admin session flag store; falls back to process memory.
    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Admin dashboard gate (shared credential pair, independent of user roles)
    admin_username: str = Field(default="admin", alias="ADMIN_USERNAME")
    admin_password: str = Field(default="admin123", alias="ADMIN_PASSWORD")
    admin_session_ttl_seconds: int = Field(
        default=24 * 60 * 60,
        alias="ADMIN_SESSION_TTL_SECONDS",
    )

    # Listing defaults
    questions_per_page: int = Field(default=10, alias="QUESTIONS_PER_PAGE")
    max_page_size: int = Field(default=50, alias="MAX_PAGE_SIZE")
    admin_list_limit: int = Field(default=50, alias="ADMIN_LIST_LIMIT")
    notifications_limit: int = Field(default=10, alias="NOTIFICATIONS_LIMIT")
    profile_content_limit: int = Field(default=20, alias="PROFILE_CONTENT_LIMIT")
    max_tags_per_question: int = Field(default=5, alias="MAX_TAGS_PER_QUESTION")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def admin_session_ttl_ms(self) -> int:
        """Admin session validity window in epoch milliseconds."""
        return self.admin_session_ttl_seconds * 1000


settings = Settings()
