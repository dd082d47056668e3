"""
Configuration system with Pydantic validation.
"""

from .schema import (
    EnvbootConfig,
    StoreConfig,
    LoggingConfig,
    LogLevel,
    DEFAULT_ENVIRONMENT,
    RUNTIME_RECORD_KEY,
)

from .loader import (
    ConfigLoader,
    load_config,
)

from .env import (
    ENV_FILES,
    FORKED_WORKER_ENV,
    dotenv_search_dirs,
    load_env,
    env_flag,
    forked_worker,
)

__all__ = [
    "EnvbootConfig",
    "StoreConfig",
    "LoggingConfig",
    "LogLevel",
    "DEFAULT_ENVIRONMENT",
    "RUNTIME_RECORD_KEY",
    "ConfigLoader",
    "load_config",
    "ENV_FILES",
    "FORKED_WORKER_ENV",
    "dotenv_search_dirs",
    "load_env",
    "env_flag",
    "forked_worker",
]
