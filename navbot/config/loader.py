"""
Configuration Loader
====================

Loads bot configuration from YAML files and the environment.
"""

import os
import logging
from pathlib import Path
from typing import Optional, Any

import yaml
from dotenv import load_dotenv, find_dotenv

from ..core.foundation.exceptions import InvalidConfigError
from .schema import BotConfig, parse_id_list
from .defaults import (
    DEFAULT_CONFIG_YAML,
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILE,
    ENV_TOKEN_VARS,
    ENV_DATABASE_URL,
    ENV_ADMIN_IDS,
    ENV_LOG_LEVEL,
    ENV_STATE_BACKEND,
    STATE_BACKENDS,
)

logger = logging.getLogger(__name__)


class ConfigLoader:
    """
    Configuration loader for navbot.

    Loads from:
    1. Custom path (if provided)
    2. ~/.navbot/config.yaml
    3. Default configuration

    and then applies environment overrides (``.env`` is read first).
    """

    def __init__(self, config_path: Optional[str] = None, env_file: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_path: Optional custom config file path
            env_file: Optional .env path (default: search from cwd)
        """
        self.config_path = config_path
        self.env_file = env_file
        self._config: Optional[BotConfig] = None

    @property
    def config_dir(self) -> Path:
        """Get configuration directory."""
        return Path(os.path.expanduser(DEFAULT_CONFIG_DIR))

    @property
    def default_config_file(self) -> Path:
        """Get default config file path."""
        return self.config_dir / DEFAULT_CONFIG_FILE

    def load(self) -> BotConfig:
        """
        Load configuration.

        Returns:
            BotConfig instance with environment overrides applied
        """
        if self._config is not None:
            return self._config

        config = self._load_file_config()
        load_dotenv(self.env_file or find_dotenv(usecwd=True))
        self._apply_env_overrides(config)

        self._config = config
        return self._config

    def _load_file_config(self) -> BotConfig:
        if self.config_path:
            config_file = Path(self.config_path)
            if config_file.exists():
                logger.info(f"Loaded config from: {config_file}")
                return self._load_from_file(config_file)
            logger.warning(f"Config file not found: {config_file}")

        if self.default_config_file.exists():
            logger.info(f"Loaded config from: {self.default_config_file}")
            return self._load_from_file(self.default_config_file)

        logger.info("Using default configuration")
        return BotConfig.default()

    def _load_from_file(self, path: Path) -> BotConfig:
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML file

        Returns:
            BotConfig instance (defaults on parse errors)
        """
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
            return BotConfig.from_dict(data)
        except yaml.YAMLError as e:
            logger.error(f"YAML parse error in {path}: {e}")
            return BotConfig.default()
        except (OSError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Error loading config from {path}: {e}")
            return BotConfig.default()

    def _apply_env_overrides(self, config: BotConfig) -> None:
        for var in ENV_TOKEN_VARS:
            token = os.getenv(var)
            if token:
                config.telegram.token = token
                break

        database_url = os.getenv(ENV_DATABASE_URL)
        if database_url:
            config.database.url = database_url

        admin_ids = os.getenv(ENV_ADMIN_IDS)
        if admin_ids:
            try:
                config.telegram.admin_ids = parse_id_list(admin_ids)
            except ValueError:
                logger.error(f"Ignoring malformed {ENV_ADMIN_IDS}: {admin_ids!r}")

        log_level = os.getenv(ENV_LOG_LEVEL)
        if log_level:
            config.logging.level = log_level.upper()

        state_backend = os.getenv(ENV_STATE_BACKEND)
        if state_backend:
            config.state.backend = state_backend.lower()

    def validate(self, config: Optional[BotConfig] = None) -> BotConfig:
        """
        Check values the bot cannot start without.

        Raises:
            InvalidConfigError
        """
        config = config or self.load()
        if not config.telegram.token:
            raise InvalidConfigError(
                "Telegram token not configured (set BOT_TOKEN in .env)", key="telegram.token"
            )
        if config.broadcast.max_concurrency < 1:
            raise InvalidConfigError(
                "broadcast.max_concurrency must be >= 1", key="broadcast.max_concurrency"
            )
        if config.broadcast.delay_seconds < 0:
            raise InvalidConfigError(
                "broadcast.delay_seconds must not be negative", key="broadcast.delay_seconds"
            )
        if config.state.backend not in STATE_BACKENDS:
            raise InvalidConfigError(
                f"state.backend must be one of {STATE_BACKENDS}", key="state.backend"
            )
        return config

    def save(self, config: Optional[BotConfig] = None, path: Optional[Path] = None):
        """
        Save configuration to file. The token is never written.

        Args:
            config: Configuration to save (default: current config)
            path: Path to save to (default: default config file)
        """
        config = config or self._config or BotConfig.default()
        path = path or self.default_config_file

        path.parent.mkdir(parents=True, exist_ok=True)

        data = config.to_dict()
        data["telegram"].pop("token", None)
        try:
            with open(path, "w") as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
            logger.info(f"Saved config to: {path}")
        except OSError as e:
            logger.error(f"Error saving config to {path}: {e}")

    def create_default_config(self, force: bool = False):
        """
        Create default config file if it doesn't exist.

        Args:
            force: Overwrite existing file
        """
        if self.default_config_file.exists() and not force:
            logger.info(f"Config file already exists: {self.default_config_file}")
            return

        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.default_config_file, "w") as f:
            f.write(DEFAULT_CONFIG_YAML)

        logger.info(f"Created default config: {self.default_config_file}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key path.

        Args:
            key: Dot-separated key path (e.g., "broadcast.delay_seconds")
            default: Default value if key not found
        """
        value = self.load()
        for part in key.split("."):
            if hasattr(value, part):
                value = getattr(value, part)
            else:
                return default
        return value
