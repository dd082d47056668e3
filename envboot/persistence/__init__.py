"""
Configuration store contract, runtime records and the JSON file store.
"""

from .records import (
    RuntimeRecord,
    RecordMeta,
    new_runtime_record,
    normalize_record,
)

from .store import (
    ConfigurationStore,
    JsonConfigurationStore,
)

__all__ = [
    "RuntimeRecord",
    "RecordMeta",
    "new_runtime_record",
    "normalize_record",
    "ConfigurationStore",
    "JsonConfigurationStore",
]
