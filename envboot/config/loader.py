"""
Configuration loader with environment variable handling.

Loads configuration from:
1. envboot.yaml (optional settings file)
2. .env.local / .env (loaded into process env, never overriding it)
3. ENVBOOT_* environment variables (highest priority)
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from envboot.errors import ConfigError
from .env import load_env
from .schema import EnvbootConfig


CONFIG_PATH_ENV = "ENVBOOT_CONFIG"
DEFAULT_CONFIG_FILE = Path("config") / "envboot.yaml"


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources.

    Priority (highest to lowest):
    1. OS Environment variables
    2. .env.local / .env files
    3. envboot.yaml
    4. Schema defaults
    """

    # ENVBOOT_* variable -> (section, key); section None means top level
    ENV_OVERRIDES = {
        "ENVBOOT_DEFAULT_ENV": (None, "default_environment"),
        "ENVBOOT_RECORD_KEY": (None, "runtime_record_key"),
        "ENVBOOT_STORE_DIR": ("store", "root_dir"),
        "ENVBOOT_LOG_DIR": ("logging", "log_dir"),
        "ENVBOOT_LOG_LEVEL": ("logging", "log_level"),
    }

    def __init__(self, config_file: Optional[Path] = None, load_dotenv_files: bool = True):
        """
        Args:
            config_file: Explicit settings file. When given it must exist.
                When omitted, ENVBOOT_CONFIG or config/envboot.yaml is used
                if present, else schema defaults apply.
            load_dotenv_files: Load .env.local/.env before reading overrides
        """
        self.config_file = Path(config_file) if config_file is not None else None
        self.load_dotenv_files = load_dotenv_files

    def _resolve_config_file(self) -> Optional[Path]:
        if self.config_file is not None:
            if not self.config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_file}")
            return self.config_file

        from_env = os.getenv(CONFIG_PATH_ENV)
        if from_env:
            p = Path(from_env)
            if not p.exists():
                raise FileNotFoundError(f"Configuration file not found: {p} (from {CONFIG_PATH_ENV})")
            return p

        return DEFAULT_CONFIG_FILE if DEFAULT_CONFIG_FILE.exists() else None

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from all sources.

        Returns:
            Merged configuration dictionary

        Raises:
            FileNotFoundError: If an explicitly named config file doesn't exist
            ConfigError: If the file does not hold a mapping
        """
        if self.load_dotenv_files:
            load_env(config_file=self.config_file or os.getenv(CONFIG_PATH_ENV) or None)

        config: Dict[str, Any] = {}

        path = self._resolve_config_file()
        if path is not None:
            with open(path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
            if loaded is None:
                loaded = {}
            if not isinstance(loaded, dict):
                raise ConfigError(f"Configuration file must contain a mapping: {path}")
            config = loaded

        for env_name, (section, key) in self.ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if not value:
                continue
            target = config if section is None else config.setdefault(section, {})
            target[key] = value

        return config

    def load_and_validate(self) -> EnvbootConfig:
        """
        Load and validate configuration.

        Returns:
            EnvbootConfig instance
        """
        config_dict = self.load()

        try:
            return EnvbootConfig(**config_dict)
        except ValidationError as e:
            raise ConfigError(f"Configuration validation failed: {e}") from e


def load_config(config_file: Optional[Path] = None) -> EnvbootConfig:
    """
    Convenience function to load and validate configuration.

    Args:
        config_file: Optional explicit settings file

    Returns:
        Validated EnvbootConfig instance
    """
    return ConfigLoader(config_file).load_and_validate()
