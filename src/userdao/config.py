"""
Application configuration with environment-driven settings.

Connection settings follow the libpq environment names (PGHOST, PGPORT, ...)
so the same environment works for psql and for this package.
"""

from functools import lru_cache
from urllib.parse import quote

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """PostgreSQL connection configuration from environment."""

    model_config = SettingsConfigDict(
        env_prefix="PG",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5432, ge=1, le=65535)
    database: str = Field(default="db")
    user: str = Field(default="postgres")
    password: str = Field(default="123456")

    # Pool sizing
    pool_min_size: int = Field(default=1, ge=0)
    pool_max_size: int = Field(
        default=5,
        ge=1,
        description="Maximum number of connections the pool should contain",
    )

    @property
    def dsn(self) -> str:
        """Build a postgresql:// DSN understood by asyncpg.

        Credentials and database name are percent-encoded so that characters
        such as `@`, `/`, `:` or `%` cannot change how the URL is split.
        """
        user = quote(self.user, safe="")
        password = quote(self.password, safe="")
        database = quote(self.database, safe="")
        return f"postgresql://{user}:{password}@{self.host}:{self.port}/{database}"


@lru_cache(maxsize=1)
def get_database_config() -> DatabaseConfig:
    """Get cached database configuration."""
    return DatabaseConfig()
