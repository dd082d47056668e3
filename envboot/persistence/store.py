"""
Configuration store contract and a file-backed implementation.

ARCHITECTURE:
- One JSON document per store key (a relative path under root_dir)
- Atomic writes (temp file + replace)
- Writes serialized by a lock

FILE STRUCTURE:
state/config/
  └─ content/config/process/runtime.json
"""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Protocol

from envboot.errors import ConfigurationStoreError
from envboot.logging import LogStream, get_logger
from .records import RuntimeRecord, normalize_record, now_ms


class ConfigurationStore(Protocol):
    """
    What the resolver needs from a configuration store.

    Any method may return a plain value or an awaitable.
    """

    def load(self, key: str) -> Any: ...

    def create(self, record: RuntimeRecord) -> Any: ...

    def update(self, record: RuntimeRecord) -> Any: ...


class JsonConfigurationStore:
    """
    File-backed configuration store.

    USAGE:
        store = JsonConfigurationStore(Path("state/config"))
        store.create(new_runtime_record("production"))
        doc = store.load("content/config/process/runtime.json")
    """

    def __init__(self, root_dir: Path = Path("state/config")):
        self.root_dir = Path(root_dir)
        self.logger = get_logger(LogStream.PERSISTENCE)
        self._write_lock = Lock()

        self.root_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        rel = Path(key)
        if not key or rel.is_absolute() or ".." in rel.parts:
            raise ConfigurationStoreError(f"Invalid store key: {key!r}", key=key)
        return self.root_dir / rel

    # ========================================================================
    # READ
    # ========================================================================

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Load the raw document stored under *key*.

        Returns:
            The document, or None if nothing is stored under *key*

        Raises:
            ConfigurationStoreError: document exists but cannot be read
        """
        path = self._path_for(key)
        if not path.exists():
            self.logger.debug("No document stored", extra={"key": key})
            return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigurationStoreError(f"Failed to read {key}: {e}", key=key) from e

        if not isinstance(data, dict):
            raise ConfigurationStoreError(f"Document {key} is not a JSON object", key=key)
        return data

    # ========================================================================
    # WRITE
    # ========================================================================

    def create(self, record: Any) -> RuntimeRecord:
        """Store a new document. Refuses to overwrite an existing one."""
        rec = self._require_record(record)
        path = self._path_for(rec.filepath)

        with self._write_lock:
            if path.exists():
                raise ConfigurationStoreError(
                    f"Document already exists: {rec.filepath}", key=rec.filepath
                )

            ts = now_ms()
            rec = rec.model_copy(deep=True)
            if rec.id is None:
                rec.id = uuid.uuid4().hex
            rec.meta.created = rec.meta.created or ts
            rec.meta.updated = ts
            self._write(path, rec)

        self.logger.info("Document created", extra={
            "key": rec.filepath,
            "environment": rec.environment,
        })
        return rec

    def update(self, record: Any) -> RuntimeRecord:
        """Replace an existing document, bumping its revision."""
        rec = self._require_record(record)
        path = self._path_for(rec.filepath)

        with self._write_lock:
            if not path.exists():
                raise ConfigurationStoreError(
                    f"Document does not exist: {rec.filepath}", key=rec.filepath
                )

            current = normalize_record(self.load(rec.filepath))
            rec = rec.model_copy(deep=True)
            if current is not None:
                rec.id = rec.id or current.id
                rec.meta.created = current.meta.created
                rec.meta.revision = current.meta.revision + 1
            rec.meta.updated = now_ms()
            self._write(path, rec)

        self.logger.info("Document updated", extra={
            "key": rec.filepath,
            "environment": rec.environment,
            "revision": rec.meta.revision,
        })
        return rec

    def _require_record(self, record: Any) -> RuntimeRecord:
        rec = normalize_record(record)
        if rec is None:
            raise ConfigurationStoreError("Cannot write an empty record")
        return rec

    def _write(self, path: Path, record: RuntimeRecord) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = path.with_suffix(path.suffix + ".tmp")
        try:
            temp_file.write_text(json.dumps(record.to_document(), indent=2), encoding="utf-8")
            temp_file.replace(path)
        except OSError as e:
            raise ConfigurationStoreError(
                f"Failed to write {record.filepath}: {e}", key=record.filepath
            ) from e
