"""Database configuration using Pydantic Settings.

The document database itself is a managed service. Locally the backend runs
against an in-memory document store, or against any SQLAlchemy async engine
(SQLite for development, PostgreSQL for self-hosting) that keeps documents
as JSON rows.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """
    Document store configuration settings.

    All settings can be overridden via environment variables with DB_ prefix.

    Example environment variables:
        DB_DRIVER=sqlite+aiosqlite
        DB_SQLITE_PATH=data/pollution_reports.db
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # "memory" keeps documents in process; anything else is an SQLAlchemy async driver
    driver: str = Field(
        default="memory",
        description="memory, sqlite+aiosqlite or postgresql+asyncpg"
    )

    # Full URL wins over the individual parts below
    url: str = Field(default="", description="Explicit SQLAlchemy async URL")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="pollution_reports", description="Database name")
    user: str = Field(default="", description="Database user")
    password: str = Field(default="", description="Database password")

    sqlite_path: Path = Field(
        default=Path("data/pollution_reports.db"),
        description="Path to SQLite database file"
    )

    echo_sql: bool = Field(
        default=False,
        description="Log all SQL statements (for debugging)"
    )
    query_timeout: int = Field(
        default=30,
        ge=1,
        description="Default query timeout in seconds"
    )

    @computed_field
    @property
    def is_memory(self) -> bool:
        """Check if documents are kept in process."""
        return self.driver.lower() == "memory" and not self.url

    @computed_field
    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite."""
        return "sqlite" in (self.url or self.driver).lower()

    @computed_field
    @property
    def async_url(self) -> str:
        """
        Get the async database URL.

        Returns:
            Database URL for async connections.
        """
        if self.url:
            return self.url

        if self.is_sqlite:
            self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
            return f"{self.driver}:///{self.sqlite_path.absolute()}"

        auth = ""
        if self.user:
            auth = f"{self.user}"
            if self.password:
                auth += f":{self.password}"
            auth += "@"

        return f"{self.driver}://{auth}{self.host}:{self.port}/{self.name}"

    def get_connect_args(self) -> dict:
        """
        Get database-specific connection arguments.

        Returns:
            Dictionary of connection arguments for SQLAlchemy.
        """
        if self.is_sqlite:
            return {
                "check_same_thread": False,
                "timeout": self.query_timeout,
            }

        return {
            "command_timeout": self.query_timeout,
        }


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """
    Get cached database settings instance.

    Returns:
        DatabaseSettings: Cached settings loaded from environment.
    """
    return DatabaseSettings()
