from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from envboot.errors import ConfigurationStoreError
from envboot.persistence import RuntimeRecord, new_runtime_record, normalize_record


def test_absent():
    assert normalize_record(None) is None


def test_record_passes_through():
    record = new_runtime_record("dev")
    assert normalize_record(record) is record


def test_mapping_drops_store_bookkeeping(valid_runtime_document):
    record = normalize_record(valid_runtime_document)

    assert record.environment == "dev"
    assert record.id == "TESTVALIDID"
    assert record.meta.updated == 1494340295729
    assert "$loki" not in record.to_document()
    assert record.to_document()["_id"] == "TESTVALIDID"


def test_to_json_invoked_once(valid_runtime_document):
    raw = MagicMock()
    raw.to_json.return_value = valid_runtime_document

    record = normalize_record(raw)

    raw.to_json.assert_called_once_with()
    assert record.environment == "dev"


def test_camel_case_conversion_and_json_text(valid_runtime_document):
    class RawDocument:
        def __init__(self):
            self.calls = 0

        def toJSON(self):
            self.calls += 1
            return json.dumps(valid_runtime_document)

    raw = RawDocument()
    assert normalize_record(raw).environment == "dev"
    assert raw.calls == 1


def test_conversion_to_nothing_is_absent():
    raw = MagicMock()
    raw.to_json.return_value = None
    assert normalize_record(raw) is None


def test_missing_fields_get_defaults():
    record = normalize_record({})
    assert record.environment is None
    assert record.meta.revision == 0


@pytest.mark.parametrize("raw", [42, ["dev"], "{broken", {"config": {"process": "dev"}}])
def test_unreadable_results(raw):
    with pytest.raises(ConfigurationStoreError):
        normalize_record(raw)


def test_with_environment_copies():
    record = new_runtime_record("dev")
    changed = record.with_environment("prod")

    assert changed.environment == "prod"
    assert record.environment == "dev"
    assert changed.id == record.id
    assert isinstance(changed, RuntimeRecord)
