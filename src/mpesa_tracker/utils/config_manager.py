"""Configuration management for the notification tracker."""

import json
import logging
import os
from typing import Dict, Any, Optional

import yaml
from dotenv import load_dotenv

from ..models.core import BotSettings, TrackerConfig, DEFAULT_CATEGORIES
from .error_handler import ConfigurationError


logger = logging.getLogger(__name__)


BOT_TOKEN_ENV = "DISCORD_BOT_TOKEN"
CHANNEL_ID_ENV = "DISCORD_CHANNEL_ID"
DATABASE_URL_ENV = "MPESA_TRACKER_DATABASE_URL"


class ConfigManager:
    """Manages loading and validation of tracker configuration"""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager

        Args:
            config_path: Path to configuration file. If None, searches for default locations.
        """
        self.config_path = config_path
        self._config_cache: Optional[TrackerConfig] = None

    def load_config(self, force_reload: bool = False) -> TrackerConfig:
        """Load tracker configuration from file or return default

        Args:
            force_reload: Force reload from file even if cached

        Returns:
            TrackerConfig instance with loaded or default configuration
        """
        if self._config_cache is not None and not force_reload:
            return self._config_cache

        config_data = self._load_config_file()
        defaults = TrackerConfig()

        try:
            self._config_cache = TrackerConfig(
                database_url=config_data.get('database_url', defaults.database_url),
                categories=config_data.get('categories'),
                retry_max_attempts=config_data.get('retry_max_attempts', defaults.retry_max_attempts),
                retry_backoff_seconds=float(config_data.get('retry_backoff_seconds', defaults.retry_backoff_seconds)),
                summary_limit=config_data.get('summary_limit', defaults.summary_limit),
                log_directory=config_data.get('log_directory'),
                command_prefix=config_data.get('command_prefix', defaults.command_prefix),
            )
            logger.info(f"Configuration loaded successfully from {self.config_path or 'defaults'}")
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Error loading configuration: {e}. Using defaults.")
            self._config_cache = TrackerConfig()

        database_url = os.getenv(DATABASE_URL_ENV)
        if database_url:
            self._config_cache.database_url = database_url

        return self._config_cache

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from file

        Returns:
            Dictionary with configuration data or empty dict if no file found
        """
        config_file = self._find_config_file()

        if not config_file or not os.path.exists(config_file):
            logger.info("No configuration file found, using defaults")
            return {}

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.endswith('.json'):
                    data = json.load(f)
                elif config_file.endswith(('.yml', '.yaml')):
                    data = yaml.safe_load(f) or {}
                else:
                    logger.warning(f"Unsupported config file format: {config_file}")
                    return {}

            self._validate_config_data(data)
            logger.info(f"Configuration loaded from {config_file}")
            return data

        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error reading configuration file {config_file}: {e}")
            return {}

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations"""
        if self.config_path:
            return self.config_path

        search_paths = [
            'tracker_config.json',
            'tracker_config.yml',
            'tracker_config.yaml',
            'config/tracker_config.json',
            'config/tracker_config.yml',
            'config/tracker_config.yaml',
            os.path.expanduser('~/.mpesa_tracker/config.json'),
            os.path.expanduser('~/.mpesa_tracker/config.yml'),
        ]

        for path in search_paths:
            if os.path.exists(path):
                return path

        return None

    def _validate_config_data(self, data: Dict[str, Any]) -> None:
        """Validate configuration data structure

        Raises:
            ValueError: If configuration data is invalid
        """
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        for str_key in ['database_url', 'command_prefix']:
            if str_key in data:
                if not isinstance(data[str_key], str):
                    raise ValueError(f"{str_key} must be a string")
                if not data[str_key].strip():
                    raise ValueError(f"{str_key} cannot be empty")

        if 'categories' in data:
            if not isinstance(data['categories'], list) or not data['categories']:
                raise ValueError("categories must be a non-empty list")
            for category in data['categories']:
                if not isinstance(category, str) or not category.strip():
                    raise ValueError("All categories must be non-empty strings")

        for int_key in ['retry_max_attempts', 'summary_limit']:
            if int_key in data:
                value = data[int_key]
                if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                    raise ValueError(f"{int_key} must be a positive integer")

        if 'retry_backoff_seconds' in data:
            value = data['retry_backoff_seconds']
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ValueError("retry_backoff_seconds must be a non-negative number")

        if 'log_directory' in data and data['log_directory'] is not None:
            if not isinstance(data['log_directory'], str):
                raise ValueError("log_directory must be a string")

    def save_config_template(self, output_path: str) -> None:
        """Generate and save a configuration file template

        Args:
            output_path: Path where to save the template
        """
        template = {
            "database_url": "sqlite:///transaction.db",
            "categories": list(DEFAULT_CATEGORIES),
            "retry_max_attempts": 3,
            "retry_backoff_seconds": 0.1,
            "summary_limit": 10,
            "log_directory": "logs",
            "command_prefix": "!summary",
        }

        try:
            output_dir = os.path.dirname(output_path)
            if output_dir:
                os.makedirs(output_dir, exist_ok=True)

            with open(output_path, 'w', encoding='utf-8') as f:
                if output_path.endswith(('.yml', '.yaml')):
                    yaml.safe_dump(template, f, default_flow_style=False, indent=2, sort_keys=False)
                else:
                    json.dump(template, f, indent=2)

            logger.info(f"Configuration template saved to {output_path}")

        except OSError as e:
            logger.error(f"Error saving configuration template: {e}")
            raise

    def update_config(self, updates: Dict[str, Any]) -> None:
        """Update configuration with new values"""
        if self._config_cache is None:
            self.load_config()

        for key, value in updates.items():
            if hasattr(self._config_cache, key):
                setattr(self._config_cache, key, value)
                logger.debug(f"Updated configuration: {key} = {value}")
            else:
                logger.warning(f"Unknown configuration key: {key}")

    def reset_config(self) -> None:
        """Reset configuration cache, forcing reload on next access"""
        self._config_cache = None
        logger.debug("Configuration cache reset")


def load_bot_settings(env_file: Optional[str] = None) -> BotSettings:
    """Load the bot credential and channel id from the environment.

    A ``.env`` file is read first when present; variables already set in the
    environment win over the file.

    Raises:
        ConfigurationError: If either value is missing
    """
    if not load_dotenv(env_file):
        logger.info("No .env file loaded; using process environment")

    bot_token = os.getenv(BOT_TOKEN_ENV, "").strip()
    if not bot_token:
        raise ConfigurationError(f"{BOT_TOKEN_ENV} is not set")

    channel_id = os.getenv(CHANNEL_ID_ENV, "").strip()
    if not channel_id:
        raise ConfigurationError(f"{CHANNEL_ID_ENV} is not set")

    return BotSettings(bot_token=bot_token, channel_id=channel_id)
