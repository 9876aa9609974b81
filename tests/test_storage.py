"""Tests for the storage implementations."""

import json
from datetime import datetime
from decimal import Decimal

import pytest

from ledger_guard.models.ledger import LedgerState, Transaction, TransactionType
from ledger_guard.services.storage import (
    CorruptStateError,
    InMemoryStorage,
    LocalJsonStorage,
    StorageError,
)


@pytest.fixture
def state():
    state = LedgerState.default(["Alice", "Bob"], now=datetime(2024, 1, 1))
    state.transactions.append(Transaction(
        user_id="1",
        amount=Decimal("1000"),
        type=TransactionType.DEPOSIT,
        timestamp=datetime(2024, 1, 5),
        remarks="opening deposit",
    ))
    state.transactions.append(Transaction(
        id="INT-2024-01-1",
        user_id="1",
        amount=Decimal("8.33"),
        type=TransactionType.INTEREST,
        timestamp=datetime(2024, 1, 31, 23, 59, 59, 999000),
        settlement_month="2024-01",
    ))
    return state


class TestLocalJsonStorage:
    """Tests for LocalJsonStorage."""

    def test_missing_file_loads_nothing(self, tmp_path):
        storage = LocalJsonStorage(path=str(tmp_path / "ledger.json"))
        assert storage.load_state() is None

    def test_round_trip(self, tmp_path, state):
        storage = LocalJsonStorage(path=str(tmp_path / "ledger.json"))
        assert storage.save_state(state) is True
        assert storage.load_state() == state

    def test_blob_stored_under_key(self, tmp_path, state):
        path = tmp_path / "ledger.json"
        LocalJsonStorage(path=str(path), storage_key="my_key").save_state(state)

        store = json.loads(path.read_text(encoding="utf-8"))
        assert list(store) == ["my_key"]
        blob = json.loads(store["my_key"])
        assert set(blob) == {"users", "transactions", "activeUserId"}
        assert blob["transactions"][1]["settlementMonth"] == "2024-01"

    def test_other_keys_preserved(self, tmp_path, state):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

        LocalJsonStorage(path=str(path)).save_state(state)

        store = json.loads(path.read_text(encoding="utf-8"))
        assert store["theme"] == "dark"
        assert "ledger_guard_db" in store

    def test_default_path_from_settings(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LEDGER_STORAGE_PATH", str(tmp_path / "custom.json"))
        storage = LocalJsonStorage()
        assert storage.path == tmp_path / "custom.json"

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CorruptStateError):
            LocalJsonStorage(path=str(path)).load_state()

    def test_malformed_blob(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text(
            json.dumps({"ledger_guard_db": '{"users": "nope"}'}),
            encoding="utf-8",
        )
        with pytest.raises(CorruptStateError):
            LocalJsonStorage(path=str(path)).load_state()

    def test_corrupt_file_is_overwritten_on_save(self, tmp_path, state):
        path = tmp_path / "ledger.json"
        path.write_text("[]", encoding="utf-8")
        storage = LocalJsonStorage(path=str(path))

        storage.save_state(state)
        assert storage.load_state() == state

    def test_clear(self, tmp_path, state):
        storage = LocalJsonStorage(path=str(tmp_path / "ledger.json"))
        storage.save_state(state)
        storage.clear()
        assert storage.load_state() is None

    def test_clear_write_failure_raises_storage_error(self, tmp_path, state, monkeypatch):
        storage = LocalJsonStorage(path=str(tmp_path / "ledger.json"))
        storage.save_state(state)

        def fail_replace(src, dst):
            raise PermissionError("read-only")

        monkeypatch.setattr("ledger_guard.services.storage.local_json.os.replace", fail_replace)
        with pytest.raises(StorageError):
            storage.clear()

    def test_backup_corrupt_blob(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"ledger_guard_db": '{"users": "nope"}'}), encoding="utf-8")
        storage = LocalJsonStorage(path=str(path))

        assert storage.backup_corrupt() == "ledger_guard_db.corrupt"
        store = json.loads(path.read_text(encoding="utf-8"))
        assert store["ledger_guard_db.corrupt"] == '{"users": "nope"}'

    def test_backup_corrupt_file(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("{not json", encoding="utf-8")
        backup = LocalJsonStorage(path=str(path)).backup_corrupt()
        assert backup == str(tmp_path / "ledger.json.corrupt")
        assert (tmp_path / "ledger.json.corrupt").read_text(encoding="utf-8") == "{not json"

    def test_backup_with_nothing_stored(self, tmp_path):
        assert LocalJsonStorage(path=str(tmp_path / "ledger.json")).backup_corrupt() is None

    def test_no_temp_files_left_behind(self, tmp_path, state):
        storage = LocalJsonStorage(path=str(tmp_path / "ledger.json"))
        storage.save_state(state)
        storage.save_state(state)
        assert [p.name for p in tmp_path.iterdir()] == ["ledger.json"]

    def test_write_failure_raises_storage_error(self, tmp_path, state):
        # The target path is a directory, so every replace attempt fails.
        target = tmp_path / "ledger.json"
        target.mkdir()
        (target / "keep").write_text("x", encoding="utf-8")
        storage = LocalJsonStorage(path=str(target))

        with pytest.raises(StorageError):
            storage.save_state(state)


class TestInMemoryStorage:
    """Tests for InMemoryStorage."""

    def test_round_trip(self, state):
        storage = InMemoryStorage()
        assert storage.load_state() is None
        storage.save_state(state)
        assert storage.load_state() == state
        assert storage.save_count == 1

    def test_malformed_blob(self):
        storage = InMemoryStorage()
        storage.blobs["ledger_guard_db"] = "garbage"
        with pytest.raises(CorruptStateError):
            storage.load_state()

    def test_backup_corrupt(self):
        storage = InMemoryStorage()
        assert storage.backup_corrupt() is None
        storage.blobs["ledger_guard_db"] = "garbage"
        assert storage.backup_corrupt() == "ledger_guard_db.corrupt"
        assert storage.blobs["ledger_guard_db.corrupt"] == "garbage"
