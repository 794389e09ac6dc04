"""
Unit tests for serialization.py module.

Tests the JSON data file format.
"""

import json

import pytest

from incomeflow.exceptions import ConfigurationError, StoreError
from incomeflow.serialization import (
    SCHEMA_VERSION,
    ledger_from_json,
    ledger_to_json,
    load_ledger,
    save_ledger,
)


@pytest.fixture
def records(salary, car_goal):
    return {
        "income_sources": [salary.to_record("alice")],
        "goals": [car_goal.to_record("alice")],
    }


class TestLedgerJson:
    """Test ledger_to_json() / ledger_from_json()."""

    def test_document_layout(self, records):
        document = json.loads(ledger_to_json(records))
        assert document["schema_version"] == SCHEMA_VERSION
        assert document["income_sources"][0]["name"] == "Salary"
        assert document["goals"][0]["allocation_type"] == "FIXED_TOTAL"

    def test_parse(self, records):
        document = ledger_from_json(ledger_to_json(records))
        assert document["income_sources"] == records["income_sources"]
        assert document["goals"] == records["goals"]

    def test_invalid_json(self):
        with pytest.raises(StoreError, match="not valid JSON"):
            ledger_from_json("{not json")

    def test_not_an_object(self):
        with pytest.raises(StoreError, match="JSON object"):
            ledger_from_json("[]")

    def test_lists_required(self):
        text = json.dumps({"schema_version": SCHEMA_VERSION, "goals": {}})
        with pytest.raises(StoreError, match="must be lists"):
            ledger_from_json(text)

    def test_record_without_id(self):
        text = json.dumps({"schema_version": SCHEMA_VERSION, "income_sources": [{"name": "x"}]})
        with pytest.raises(StoreError, match="Malformed record"):
            ledger_from_json(text)

    def test_schema_version_mismatch_warns(self):
        text = json.dumps({"schema_version": "0.9.0", "income_sources": [], "goals": []})
        with pytest.warns(UserWarning, match="schema version"):
            document = ledger_from_json(text)
        assert document["goals"] == []


class TestLedgerFiles:
    """Test save_ledger() / load_ledger()."""

    def test_save_and_load(self, tmp_path, records):
        path = tmp_path / "nested" / "ledger.json"
        save_ledger(records, path)
        assert path.exists()
        assert not (path.parent / "ledger.json.tmp").exists()
        assert load_ledger(path)["goals"] == records["goals"]

    def test_load_missing_file(self, tmp_path):
        document = load_ledger(tmp_path / "missing.json")
        assert document == {"schema_version": SCHEMA_VERSION, "income_sources": [], "goals": []}

    def test_directory_rejected(self, tmp_path, records):
        with pytest.raises(ConfigurationError):
            save_ledger(records, tmp_path)
        with pytest.raises(ConfigurationError):
            load_ledger(tmp_path)

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("garbage", encoding="utf-8")
        with pytest.raises(StoreError):
            load_ledger(path)
