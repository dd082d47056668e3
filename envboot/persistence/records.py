"""
Persisted runtime record and the single normalization point for
whatever a configuration store hands back.

DOCUMENT SHAPE:
    {
        "filepath": "content/config/process/runtime.json",
        "config": {"process": {"environment": "production"}},
        "_id": "5f0c...",
        "meta": {"revision": 0, "created": 1494338785207,
                 "version": 0, "updated": 1494340295729}
    }
"""

from __future__ import annotations

import json
import time
import uuid
from collections.abc import Mapping
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from envboot.config.schema import RUNTIME_RECORD_KEY
from envboot.errors import ConfigurationStoreError


def now_ms() -> int:
    """Epoch timestamp in milliseconds, the store's timestamp unit."""
    return int(time.time() * 1000)


class ProcessSection(BaseModel):
    model_config = ConfigDict(extra="allow")

    environment: Optional[str] = None


class RecordConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    process: ProcessSection = Field(default_factory=ProcessSection)


class RecordMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    revision: int = 0
    created: Optional[int] = None
    version: int = 0
    updated: Optional[int] = None


class RuntimeRecord(BaseModel):
    """Canonical runtime record. Store bookkeeping keys (e.g. "$loki") are dropped."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    filepath: str = RUNTIME_RECORD_KEY
    config: RecordConfig = Field(default_factory=RecordConfig)
    id: Optional[str] = Field(default=None, alias="_id")
    meta: RecordMeta = Field(default_factory=RecordMeta)

    @property
    def environment(self) -> Optional[str]:
        return self.config.process.environment

    def with_environment(self, environment: str) -> "RuntimeRecord":
        """Copy of this record holding *environment*."""
        record = self.model_copy(deep=True)
        record.config.process.environment = environment
        return record

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def new_runtime_record(environment: str, filepath: str = RUNTIME_RECORD_KEY) -> RuntimeRecord:
    ts = now_ms()
    return RuntimeRecord(
        filepath=filepath,
        config=RecordConfig(process=ProcessSection(environment=environment)),
        id=uuid.uuid4().hex,
        meta=RecordMeta(revision=0, created=ts, version=0, updated=ts),
    )


def normalize_record(raw: Any) -> Optional[RuntimeRecord]:
    """
    Convert a store result into a RuntimeRecord, or None when absent.

    Accepts:
    - None (no record)
    - RuntimeRecord instances (returned as-is)
    - objects exposing to_json()/toJSON() (called exactly once; the result
      may be a mapping, a JSON string or None)
    - other pydantic models (dumped by alias)
    - plain mappings

    Raises:
        ConfigurationStoreError: result cannot be read as a runtime record
    """
    if raw is None:
        return None
    if isinstance(raw, RuntimeRecord):
        return raw

    for attr in ("to_json", "toJSON"):
        convert = getattr(raw, attr, None)
        if callable(convert):
            raw = convert()
            break
    else:
        if isinstance(raw, BaseModel):
            raw = raw.model_dump(by_alias=True)

    if raw is None:
        return None
    if isinstance(raw, RuntimeRecord):
        return raw
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise ConfigurationStoreError(f"Runtime record is not valid JSON: {e}") from e
    if not isinstance(raw, Mapping):
        raise ConfigurationStoreError(
            f"Runtime record has unsupported type: {type(raw).__name__}"
        )

    try:
        return RuntimeRecord.model_validate(dict(raw))
    except ValidationError as e:
        raise ConfigurationStoreError(f"Malformed runtime record: {e}") from e
