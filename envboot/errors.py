"""
Exception hierarchy shared across envboot.
"""


class EnvbootError(Exception):
    """Base class for envboot failures."""


class ConfigError(EnvbootError):
    """Settings could not be loaded or failed validation."""


class ConfigurationStoreError(EnvbootError):
    """A configuration store read or write failed."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key
