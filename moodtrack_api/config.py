"""Service configuration loaded from the environment and an optional .env file."""

from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service, Last.fm, database and CORS settings (environment variables are case-insensitive)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Service settings
    service_host: str = Field(default="0.0.0.0", description="Host to bind the service")
    service_port: int = Field(default=8765, description="Port to bind the service")
    service_workers: int = Field(default=4, description="Number of worker processes")
    log_level: str = Field(default="info", description="Logging level")

    # Last.fm
    lastfm_api_key: str | None = Field(default=None, description="Last.fm API key")
    lastfm_api_secret: str | None = Field(
        default=None, description="Last.fm shared secret used to sign requests"
    )
    lastfm_api_url: str = Field(
        default="https://ws.audioscrobbler.com/2.0/",
        description="Last.fm API root",
    )
    lastfm_timeout_seconds: float = Field(
        default=10.0, description="Timeout for each call to Last.fm"
    )
    lastfm_enrichment_concurrency: int = Field(
        default=5,
        description="Maximum concurrent track.getInfo lookups while enriching search results",
    )

    # Database - PostgreSQL connection
    database_url: str | None = Field(
        default=None,
        description="Full database connection URL (overrides individual fields)",
    )
    database_user: str = Field(default="moodtrack_dev", description="Database username")
    database_password: str = Field(default="dev_password", description="Database password")
    database_host: str = Field(default="localhost", description="Database host")
    database_port: int = Field(default=5432, description="Database port")
    database_name: str = Field(default="moodtrack_dev", description="Database name")
    database_pool_min_size: int = Field(
        default=2,
        description="Minimum database connection pool size",
    )
    database_pool_max_size: int = Field(
        default=10,
        description="Maximum database connection pool size",
    )
    database_command_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for a single database command",
    )
    database_ssl_mode: str = Field(
        default="prefer",
        description="SSL mode: disable, prefer, require",
    )

    # CORS
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:8081",
        description="Allowed CORS origins (comma-separated)",
    )

    @field_validator("log_level")
    @classmethod
    def _lowercase_log_level(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("lastfm_api_url")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        # Calls are posted to the API root itself, which ends in a slash
        return value if value.endswith("/") else value + "/"

    def get_allowed_origins(self) -> list[str]:
        """CORS origins, blanks dropped."""
        origins = (origin.strip() for origin in self.allowed_origins.split(","))
        return [origin for origin in origins if origin]

    def get_lastfm_credentials(self) -> tuple[str, str]:
        """Return the Last.fm API key and shared secret.

        Raises:
            RuntimeError: If either value is missing
        """
        if not self.lastfm_api_key or not self.lastfm_api_secret:
            raise RuntimeError(
                "Last.fm credentials are not configured. "
                "Set LASTFM_API_KEY and LASTFM_API_SECRET in the environment or .env file."
            )
        return self.lastfm_api_key, self.lastfm_api_secret

    def get_database_url(self) -> str:
        """asyncpg DSN: ``database_url`` verbatim, or one assembled from the parts.

        Credentials are percent-encoded. ``sslmode`` is appended unless it is "disable".
        """
        if self.database_url:
            return self.database_url

        credentials = f"{quote_plus(self.database_user)}:{quote_plus(self.database_password)}"
        dsn = (
            f"postgresql://{credentials}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )
        if self.database_ssl_mode != "disable":
            dsn += f"?sslmode={self.database_ssl_mode}"
        return dsn


# Global settings instance
settings = Settings()
