"""Configuration management for sql-context."""

from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional


def _env_file_candidates() -> List[Path]:
    return [
        Path(".env"),
        Path.home() / ".sql-context" / ".env",
        Path(__file__).parent.parent / ".env",
    ]


def _find_env_file() -> Optional[str]:
    """First existing .env: working directory, ~/.sql-context, then next to the package."""
    for candidate in _env_file_candidates():
        if candidate.is_file():
            return str(candidate)
    return None


class Settings(BaseSettings):
    """Application settings loaded from SQL_CONTEXT_* environment variables."""

    log_level: str = Field(
        default="WARNING",
        description="Log level used by the CLI (DEBUG, INFO, WARNING, ERROR)"
    )

    # Connection defaults applied by the CLI when building descriptors
    connect_timeout: Optional[int] = Field(
        default=None,
        description="Driver connect timeout in seconds (default: driver default)"
    )
    postgres_port: int = Field(
        default=5432,
        description="Default PostgreSQL port"
    )
    mysql_port: int = Field(
        default=3306,
        description="Default MySQL port"
    )

    # Output
    output_format: str = Field(
        default="markdown",
        description="Default output format: 'markdown' or 'json'"
    )

    class Config:
        env_prefix = "SQL_CONTEXT_"
        env_file = _find_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
