"""
Configuration and parameter loading using Pydantic.

This module provides centralized configuration management for the entire application.
All parameters are loaded from YAML and validated using Pydantic models.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from glucose_log.utils.exceptions import ConfigurationError


class StorageConfig(BaseModel):
    """Local key-value storage configuration."""

    data_dir: str = "data"
    entries_key: str = "blood_sugar_logs"
    language_key: str = "blood_sugar_lang"


class ProcessingConfig(BaseModel):
    """Entry processing configuration."""

    timezone: str = "Europe/Copenhagen"
    default_language: str = Field("da", pattern="^(da|en)$")


class AssistantConfig(BaseModel):
    """AI assistant configuration."""

    model: str = "gpt-4.1-mini"
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    context_size: int = Field(20, gt=0)
    api_key_env: str = "OPENAI_API_KEY"


class ExportConfig(BaseModel):
    """Export configuration."""

    dir: str = "exports"
    formats: list[str] = Field(default_factory=lambda: ["json"])


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    console: bool = True


class AppConfig(BaseSettings):
    """Main application configuration."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    assistant: AssistantConfig = Field(default_factory=AssistantConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="GLUCOSE_LOG_", env_nested_delimiter="__", case_sensitive=False
    )


class ParameterLoader:
    """
    Centralized parameter loader for the application.

    Loads and validates configuration from YAML files using Pydantic models.
    Provides type-safe access to all configuration parameters.
    """

    def __init__(self, config_path: str = "config/config.yaml") -> None:
        """
        Initialize parameter loader.

        Args:
            config_path: Path to the YAML configuration file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        self.config_path = Path(config_path)
        self.config: AppConfig
        self._load_config()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                config_dict = yaml.safe_load(f) or {}

            if not isinstance(config_dict, dict):
                raise ConfigurationError(
                    f"Configuration root must be a mapping: {self.config_path}"
                )

            self.config = AppConfig(**config_dict)

        except ConfigurationError:
            raise
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML configuration: {e}") from e
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def get_storage_config(self) -> StorageConfig:
        """Get local storage configuration."""
        return self.config.storage

    def get_processing_config(self) -> ProcessingConfig:
        """Get entry processing configuration."""
        return self.config.processing

    def get_assistant_config(self) -> AssistantConfig:
        """Get AI assistant configuration."""
        return self.config.assistant

    def get_export_config(self) -> ExportConfig:
        """Get export configuration."""
        return self.config.export

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration."""
        return self.config.logging
