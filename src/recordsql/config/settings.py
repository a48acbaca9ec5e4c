"""
Configuration management for recordsql.

This module provides environment-based configuration using Pydantic BaseSettings.
Database connection details, logging level and record-handling limits are read
from environment variables or an optional ``.env`` file.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

import structlog
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("RECORDSQL_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Unprefixed fields (uppercase names):
    - DATABASE_URL (required): SQLAlchemy database URL
    - ENVIRONMENT: Deployment environment (dev, staging, prod)
    - LOG_LEVEL: Logging level
    - DB_ECHO: Echo SQL statements through SQLAlchemy's logger

    Prefixed fields use RECORDSQL_, e.g. RECORDSQL_MAX_RECORD_DEPTH overrides
    max_record_depth.
    """

    DATABASE_URL: str = Field(
        ...,
        validation_alias="DATABASE_URL",
        description="SQLAlchemy database URL",
    )
    ENVIRONMENT: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        validation_alias="ENVIRONMENT",
        description="Deployment environment",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )
    DB_ECHO: bool = Field(
        default=False,
        validation_alias="DB_ECHO",
        description="Log every SQL statement issued by the engine",
    )

    max_record_depth: int = Field(
        default=32,
        ge=1,
        description="Maximum nesting level when flattening structured records",
    )
    id_column: str = Field(
        default="id",
        min_length=1,
        description="Default identifier column returned by insert_and_get_id",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def normalize_database_url(cls, value: str) -> str:
        """Rewrite the deprecated ``postgres://`` scheme for SQLAlchemy."""
        if value.startswith("postgres://"):
            return value.replace("postgres://", "postgresql://", 1)
        return value

    @model_validator(mode="after")
    def validate_production_database_url(self) -> "Settings":
        """Validate that production environment uses PostgreSQL.

        INSERT ... RETURNING statements target PostgreSQL, so production
        deployments must not point at another backend.

        Raises:
            ValueError: If ENVIRONMENT is 'prod' and database URL is not PostgreSQL
        """
        if self.ENVIRONMENT == "prod" and not self.DATABASE_URL.startswith(
            "postgresql"
        ):
            db_url_preview = self.DATABASE_URL[:20]
            logger.error(
                "configuration.invalid_production_database",
                environment=self.ENVIRONMENT,
            )
            raise ValueError(
                "Production environment requires PostgreSQL database. "
                f"Database URL must start with 'postgresql', "
                f"got: {db_url_preview}..."
            )
        return self

    model_config = SettingsConfigDict(
        env_prefix="RECORDSQL_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()
