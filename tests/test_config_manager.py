"""Tests for configuration management."""

import json
import os
import tempfile
import unittest

import pytest
import yaml

from mpesa_tracker.models.core import TrackerConfig, DEFAULT_CATEGORIES
from mpesa_tracker.utils.config_manager import (
    BOT_TOKEN_ENV,
    CHANNEL_ID_ENV,
    DATABASE_URL_ENV,
    ConfigManager,
    load_bot_settings,
)
from mpesa_tracker.utils.error_handler import ConfigurationError


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager"""

    def setUp(self):
        """Set up test fixtures"""
        self.temp_dir = tempfile.mkdtemp()
        self.config_file = os.path.join(self.temp_dir, 'test_config.json')
        self._saved_url = os.environ.pop(DATABASE_URL_ENV, None)

    def tearDown(self):
        """Clean up test fixtures"""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        os.environ.pop(DATABASE_URL_ENV, None)
        if self._saved_url is not None:
            os.environ[DATABASE_URL_ENV] = self._saved_url

    def test_default_config_loading(self):
        """Test loading default configuration when no file exists"""
        manager = ConfigManager(config_path="nonexistent_file.json")
        config = manager.load_config()

        self.assertIsInstance(config, TrackerConfig)
        self.assertEqual(config.database_url, "sqlite:///transaction.db")
        self.assertEqual(config.categories, list(DEFAULT_CATEGORIES))
        self.assertEqual(config.retry_max_attempts, 3)
        self.assertEqual(config.summary_limit, 10)

    def test_config_file_loading(self):
        """Test loading configuration from JSON file"""
        test_config = {
            "database_url": "sqlite:///custom.db",
            "categories": ["Food", "Rent"],
            "retry_max_attempts": 5,
            "retry_backoff_seconds": 0.5,
            "summary_limit": 3,
        }

        with open(self.config_file, 'w') as f:
            json.dump(test_config, f)

        manager = ConfigManager(config_path=self.config_file)
        config = manager.load_config()

        self.assertEqual(config.database_url, "sqlite:///custom.db")
        self.assertEqual(config.categories, ["food", "rent"])
        self.assertEqual(config.retry_max_attempts, 5)
        self.assertEqual(config.retry_backoff_seconds, 0.5)
        self.assertEqual(config.summary_limit, 3)
        self.assertEqual(config.command_prefix, "!summary")

    def test_yaml_config_loading(self):
        """Test loading configuration from YAML file"""
        yaml_file = os.path.join(self.temp_dir, 'config.yml')
        with open(yaml_file, 'w') as f:
            yaml.safe_dump({"summary_limit": 7, "command_prefix": "!report"}, f)

        config = ConfigManager(config_path=yaml_file).load_config()

        self.assertEqual(config.summary_limit, 7)
        self.assertEqual(config.command_prefix, "!report")

    def test_invalid_config_falls_back_to_defaults(self):
        """Test that invalid values are ignored in favour of defaults"""
        for bad in ({"categories": []}, {"retry_max_attempts": 0}, {"database_url": ""},
                    {"retry_backoff_seconds": -1}, {"summary_limit": "ten"}):
            with open(self.config_file, 'w') as f:
                json.dump(bad, f)

            config = ConfigManager(config_path=self.config_file).load_config()

            self.assertEqual(config, TrackerConfig(), msg=str(bad))

    def test_malformed_json(self):
        with open(self.config_file, 'w') as f:
            f.write("{not json")

        config = ConfigManager(config_path=self.config_file).load_config()

        self.assertEqual(config, TrackerConfig())

    def test_config_is_cached(self):
        manager = ConfigManager(config_path=self.config_file)
        first = manager.load_config()

        with open(self.config_file, 'w') as f:
            json.dump({"summary_limit": 4}, f)

        self.assertIs(manager.load_config(), first)
        self.assertEqual(manager.load_config(force_reload=True).summary_limit, 4)

    def test_database_url_from_environment(self):
        os.environ[DATABASE_URL_ENV] = "sqlite:///from_env.db"

        config = ConfigManager(config_path=self.config_file).load_config()

        self.assertEqual(config.database_url, "sqlite:///from_env.db")

    def test_save_config_template(self):
        """Test generating configuration templates in both formats"""
        manager = ConfigManager()
        json_path = os.path.join(self.temp_dir, 'nested', 'template.json')
        yaml_path = os.path.join(self.temp_dir, 'template.yaml')

        manager.save_config_template(json_path)
        manager.save_config_template(yaml_path)

        with open(json_path) as f:
            json_template = json.load(f)
        with open(yaml_path) as f:
            yaml_template = yaml.safe_load(f)

        self.assertEqual(json_template, yaml_template)
        self.assertEqual(json_template['categories'], list(DEFAULT_CATEGORIES))

        config = ConfigManager(config_path=yaml_path).load_config()
        self.assertEqual(config.log_directory, "logs")

    def test_update_and_reset(self):
        manager = ConfigManager(config_path=self.config_file)
        manager.update_config({"summary_limit": 2, "unknown": 1})

        self.assertEqual(manager.load_config().summary_limit, 2)

        manager.reset_config()
        self.assertEqual(manager.load_config().summary_limit, 10)


class TestLoadBotSettings:
    """Test cases for load_bot_settings"""

    def setup_method(self):
        """Set up test fixtures"""
        self.temp_dir = tempfile.mkdtemp()
        self.missing_env_file = os.path.join(self.temp_dir, 'missing.env')

    def teardown_method(self):
        """Clean up test fixtures"""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv(BOT_TOKEN_ENV, "token-123")
        monkeypatch.setenv(CHANNEL_ID_ENV, "42")

        settings = load_bot_settings(self.missing_env_file)

        assert settings.bot_token == "token-123"
        assert settings.channel_id == "42"

    def test_from_env_file(self, monkeypatch):
        """Test values read from a .env file"""
        monkeypatch.delenv(BOT_TOKEN_ENV, raising=False)
        monkeypatch.delenv(CHANNEL_ID_ENV, raising=False)
        env_file = os.path.join(self.temp_dir, '.env')
        with open(env_file, 'w') as f:
            f.write(f"{BOT_TOKEN_ENV}=file-token\n{CHANNEL_ID_ENV}=99\n")

        try:
            settings = load_bot_settings(env_file)
        finally:
            # load_dotenv writes into os.environ directly
            os.environ.pop(BOT_TOKEN_ENV, None)
            os.environ.pop(CHANNEL_ID_ENV, None)

        assert settings.bot_token == "file-token"
        assert settings.channel_id == "99"

    def test_missing_token(self, monkeypatch):
        monkeypatch.delenv(BOT_TOKEN_ENV, raising=False)
        monkeypatch.setenv(CHANNEL_ID_ENV, "42")

        with pytest.raises(ConfigurationError, match=BOT_TOKEN_ENV):
            load_bot_settings(self.missing_env_file)

    def test_missing_channel(self, monkeypatch):
        monkeypatch.setenv(BOT_TOKEN_ENV, "token-123")
        monkeypatch.setenv(CHANNEL_ID_ENV, "  ")

        with pytest.raises(ConfigurationError, match=CHANNEL_ID_ENV):
            load_bot_settings(self.missing_env_file)
