"""
Configuration Settings.

This module defines the toolscope configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", alias="TOOLSCOPE_LOG_LEVEL", description="Root log level")
    format: str = Field(
        default="detailed", alias="TOOLSCOPE_LOG_FORMAT", description="Log format (simple, detailed, json)"
    )
    file_dir: str = Field(default="logs", alias="TOOLSCOPE_LOG_FILE_DIR", description="Directory for the log file")
    enable_file: bool = Field(
        default=False, alias="TOOLSCOPE_ENABLE_FILE_LOGGING", description="Write logs to a file as well"
    )

    model_config = {"populate_by_name": True}


class SelectionConfig(BaseModel):
    """Per-turn capability selection configuration."""

    max_tools: int = Field(
        default=20, ge=1, alias="TOOLSCOPE_MAX_TOOLS", description="Maximum capabilities returned per query"
    )
    search_fanout: int = Field(
        default=10, ge=1, alias="TOOLSCOPE_SEARCH_FANOUT", description="Candidate bundles requested from the index"
    )
    dependency_decay: float = Field(
        default=0.5,
        gt=0.0,
        le=1.0,
        alias="TOOLSCOPE_DEPENDENCY_DECAY",
        description="Score multiplier applied per dependency hop",
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="TOOLSCOPE_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Logging format (simple, detailed, json)",
        alias="TOOLSCOPE_LOG_FORMAT",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory the log file is written to",
        alias="TOOLSCOPE_LOG_FILE_DIR",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Enable file logging in addition to the console",
        alias="TOOLSCOPE_ENABLE_FILE_LOGGING",
    )

    # =====================================================================
    # Selection Configuration
    # =====================================================================
    max_tools: int = Field(
        default=20,
        ge=1,
        description="Maximum number of capabilities returned by a selection",
        alias="TOOLSCOPE_MAX_TOOLS",
    )
    search_fanout: int = Field(
        default=10,
        ge=1,
        description="Number of candidate bundles requested from the relevance index",
        alias="TOOLSCOPE_SEARCH_FANOUT",
    )
    dependency_decay: float = Field(
        default=0.5,
        gt=0.0,
        le=1.0,
        description="Score multiplier applied for every dependency hop",
        alias="TOOLSCOPE_DEPENDENCY_DECAY",
    )

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration from environment variables."""
        return LoggingConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def selection(self) -> SelectionConfig:
        """Get selection configuration from environment variables."""
        return SelectionConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
