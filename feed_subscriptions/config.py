"""Configuration management - loads settings.yaml and environment variables."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from feed_subscriptions.models.settings import (
    AuthConfig,
    PubSubConfig,
    ServiceConfig,
    SettingsFile,
)


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


class Config:
    """Application configuration loader and manager.

    Loads settings.yaml and provides validated access to:
    - Pub/Sub configuration
    - Caller authorization settings
    - Core service settings
    """

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to settings.yaml file. If not provided, uses SETTINGS_PATH env var
                        or defaults to ./config/settings.yaml
        """
        self._config_path = self._resolve_config_path(config_path)
        self._settings: Optional[SettingsFile] = None
        self._load_config()

    def _resolve_config_path(self, config_path: Optional[str]) -> Path:
        """Resolve configuration file path from argument, env var, or default."""
        if config_path:
            return Path(config_path)

        env_path = os.getenv("SETTINGS_PATH")
        if env_path:
            return Path(env_path)

        return Path("config/settings.yaml")

    def _load_config(self) -> None:
        """Load and validate settings.yaml configuration."""
        if not self._config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {self._config_path}\n"
                f"Please create config/settings.yaml or set SETTINGS_PATH environment variable"
            )

        try:
            with open(self._config_path, encoding="utf-8") as f:
                raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML configuration: {e}") from e

        if not raw_config:
            raise ConfigurationError(f"Configuration file is empty: {self._config_path}")

        try:
            self._settings = SettingsFile(**raw_config)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e
        except TypeError as e:
            raise ConfigurationError(f"Configuration must be a mapping: {e}") from e

    @property
    def settings(self) -> SettingsFile:
        """Get validated settings."""
        if self._settings is None:
            raise ConfigurationError("Configuration not loaded")
        return self._settings

    @property
    def config_path(self) -> Path:
        """Get path to configuration file."""
        return self._config_path

    @property
    def pubsub(self) -> PubSubConfig:
        return self.settings.pubsub

    @property
    def pubsub_project_id(self) -> str:
        """Get Pub/Sub project ID."""
        return self.settings.pubsub.project_id

    @property
    def pubsub_topic(self) -> str:
        """Get Pub/Sub topic name."""
        return self.settings.pubsub.topic

    @property
    def pubsub_subscription(self) -> str:
        """Get default Pub/Sub subscription name."""
        return self.settings.pubsub.default_subscription

    @property
    def auth(self) -> AuthConfig:
        return self.settings.auth

    @property
    def service(self) -> ServiceConfig:
        return self.settings.service

    def reload(self) -> None:
        """Reload configuration from disk.

        Useful for development when settings.yaml is modified.
        """
        self._load_config()


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config(config_path: Optional[str] = None) -> Config:
    """Get global configuration instance (singleton).

    Args:
        config_path: Optional path to configuration file (only used on first call)

    Returns:
        Config instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config(config_path)
    return _config_instance


def reload_config() -> None:
    """Reload global configuration from disk."""
    global _config_instance
    if _config_instance:
        _config_instance.reload()
    else:
        _config_instance = Config()
