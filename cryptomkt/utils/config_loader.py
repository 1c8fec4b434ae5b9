"""
Configuration loader for the CryptoMarket client.

Loads configuration from:
1. YAML file (config/config.yaml)
2. Environment variables (CRYPTOMKT_* prefix)
3. .env file (via python-dotenv)

Environment variables override YAML values.
API credentials MUST be set via environment (never in YAML).
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

from config.settings import (
    ClientConfig,
    CryptoMktConfig,
    LoggingConfig,
)

logger = logging.getLogger(__name__)


def _as_bool(value: Any) -> bool:
    """Read a YAML flag; quoted strings use the same words as env overrides."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


class ConfigLoader:
    """
    Loads and validates client configuration.

    Configuration priority (highest to lowest):
    1. Environment variables (CRYPTOMKT_*)
    2. YAML config file
    3. Default values in dataclasses
    """

    ENV_PREFIX = "CRYPTOMKT_"

    def __init__(
        self,
        config_path: Optional[str] = None,
        env_file: Optional[str] = None,
    ):
        """
        Initialize config loader.

        Args:
            config_path: Path to YAML config file. If None, uses config/config.yaml
            env_file: Path to .env file. If None, uses .env in working directory
        """
        self._config_path = Path(config_path) if config_path else Path("config/config.yaml")
        self._env_file = Path(env_file) if env_file else Path(".env")

        if self._env_file.exists():
            load_dotenv(self._env_file)
            logger.debug(f"Loaded environment from {self._env_file}")

    def load(self) -> ClientConfig:
        """
        Load complete client configuration.

        Returns:
            ClientConfig with all settings populated

        Raises:
            ValueError: If an environment override cannot be converted
        """
        yaml_config = self._load_yaml()

        config = self._build_config(yaml_config)

        errors = config.validate()
        if errors:
            for error in errors:
                logger.warning(f"Config warning: {error}")

        return config

    def _load_yaml(self) -> Dict[str, Any]:
        """Load YAML configuration file."""
        if not self._config_path.exists():
            logger.warning(f"Config file not found: {self._config_path}, using defaults")
            return {}

        with open(self._config_path) as f:
            config = yaml.safe_load(f) or {}

        logger.info(f"Loaded config from {self._config_path}")
        return config

    def _get_env(self, key: str, default: Any = None) -> Any:
        """
        Get environment variable with CRYPTOMKT_ prefix.

        Args:
            key: Variable name (without prefix)
            default: Default value if not set

        Returns:
            Environment variable value or default
        """
        full_key = f"{self.ENV_PREFIX}{key}"
        value = os.environ.get(full_key)

        if value is None:
            return default

        # Type conversion based on default type
        if isinstance(default, bool):
            return value.lower() in ("true", "1", "yes")
        elif isinstance(default, int):
            return int(value)
        elif isinstance(default, float):
            return float(value)

        return value

    def _get_required_env(self, key: str) -> str:
        """
        Get required environment variable.

        Args:
            key: Variable name (without prefix)

        Returns:
            Environment variable value

        Raises:
            ValueError: If variable not set
        """
        full_key = f"{self.ENV_PREFIX}{key}"
        value = os.environ.get(full_key)

        if not value:
            raise ValueError(
                f"Required environment variable {full_key} not set. "
                f"Set it in .env file or environment."
            )

        return value

    def _build_config(self, yaml_config: Dict[str, Any]) -> ClientConfig:
        """Build ClientConfig from YAML and environment."""
        defaults = CryptoMktConfig()

        api_yaml = yaml_config.get("api") or {}
        api = CryptoMktConfig(
            base_url=self._get_env(
                "BASE_URL",
                api_yaml.get("base_url", defaults.base_url)
            ),
            request_timeout=self._get_env(
                "REQUEST_TIMEOUT",
                api_yaml.get("request_timeout", defaults.request_timeout)
            ),
            pool_connections=api_yaml.get("pool_connections", defaults.pool_connections),
            pool_maxsize=api_yaml.get("pool_maxsize", defaults.pool_maxsize),
            user_agent=api_yaml.get("user_agent", defaults.user_agent),
            log_responses=self._get_env(
                "LOG_RESPONSES",
                _as_bool(api_yaml.get("log_responses", defaults.log_responses))
            ),
        )

        logging_yaml = yaml_config.get("logging") or {}
        log_config = LoggingConfig(
            level=self._get_env("LOG_LEVEL", logging_yaml.get("level", "INFO")),
            file_path=logging_yaml.get("file_path"),
        )

        return ClientConfig(api=api, logging=log_config)

    def get_api_credentials(self) -> Tuple[str, str]:
        """
        Get API credentials from environment.

        API credentials MUST be set via environment variables,
        never stored in config files.

        Returns:
            Tuple of (api_key, api_secret)

        Raises:
            ValueError: If credentials not set
        """
        api_key = self._get_required_env("API_KEY")
        api_secret = self._get_required_env("API_SECRET")
        return api_key, api_secret
