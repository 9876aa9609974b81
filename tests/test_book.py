"""Tests for the LedgerBook state container."""

import json
from datetime import datetime
from decimal import Decimal

import pytest

from ledger_guard.book import LedgerBook
from ledger_guard.models.ledger import LedgerState, TransactionType
from ledger_guard.services.storage import (
    DuplicateError,
    InMemoryStorage,
    LocalJsonStorage,
    NotFoundError,
)


def interest_tx(make_tx, month="2024-01", user_id="1", amount="8.33", **kwargs):
    return make_tx(
        amount,
        TransactionType.INTEREST,
        when=datetime(2024, 1, 31, 23, 59, 59),
        user_id=user_id,
        settlement_month=month,
        **kwargs,
    )


class TestLoading:
    """Tests for LedgerBook.load."""

    def test_empty_storage_gives_default_users(self, storage):
        book = LedgerBook.load(storage, default_user_names=["Alice", "Bob"])
        assert [u.name for u in book.users] == ["Alice", "Bob"]
        assert book.active_user_id == "1"
        assert book.transactions == ()

    def test_default_names_from_settings(self, storage, monkeypatch):
        monkeypatch.setenv("LEDGER_DEFAULT_USER_NAMES", "Mia, Noah ,Ola")
        book = LedgerBook.load(storage)
        assert [u.name for u in book.users] == ["Mia", "Noah", "Ola"]

    def test_malformed_blob_falls_back_to_default(self, storage):
        storage.blobs["ledger_guard_db"] = '{"users": 42}'
        book = LedgerBook.load(storage, default_user_names=["Alice", "Bob"])
        assert len(book.users) == 2
        assert book.transactions == ()

    def test_malformed_blob_is_backed_up(self, storage):
        storage.blobs["ledger_guard_db"] = '{"users": 42}'
        book = LedgerBook.load(storage, default_user_names=["Alice"])
        book.select_user("1")
        book.add_user("Bob")
        assert storage.blobs["ledger_guard_db.corrupt"] == '{"users": 42}'

    def test_older_blob_with_negative_interest_loads(self, tmp_path):
        """Blobs written before interest was floored at zero still load intact."""
        path = tmp_path / "ledger.json"
        blob = {
            "users": [
                {"id": "1", "name": "User 1", "createdAt": 1704067200000},
                {"id": "2", "name": "User 2", "createdAt": 1704067200000},
            ],
            "transactions": [
                {"id": "a", "userId": "1", "amount": 100, "type": "DEPOSIT",
                 "timestamp": 1704441600000, "remarks": ""},
                {"id": "b", "userId": "1", "amount": -1100, "type": "WITHDRAWAL",
                 "timestamp": 1705305600000, "remarks": "rent"},
                {"id": "INT-2024-01-1", "userId": "1", "amount": -8.3333,
                 "type": "INTEREST", "timestamp": 1706741999999,
                 "remarks": "Interest settlement: 2024-01",
                 "settlementMonth": "2024-01"},
            ],
            "activeUserId": "1",
        }
        path.write_text(json.dumps({"ledger_guard_db": json.dumps(blob)}), encoding="utf-8")

        book = LedgerBook.load(LocalJsonStorage(path=str(path)))
        assert len(book.transactions) == 3
        assert book.is_settled("1", "2024-01")

        book.select_user("2")
        reloaded = LedgerBook.load(LocalJsonStorage(path=str(path)))
        assert len(reloaded.transactions) == 3
        assert reloaded.transactions[2].amount == Decimal("-8.3333")

    def test_loads_persisted_state(self, book, storage, make_tx):
        book.append_transaction(make_tx(1000))
        reloaded = LedgerBook.load(storage)
        assert reloaded.transactions == book.transactions
        assert [u.name for u in reloaded.users] == ["Alice", "Bob"]

    def test_settlement_index_rebuilt_on_load(self, book, storage, make_tx):
        book.append_transaction(interest_tx(make_tx))
        reloaded = LedgerBook.load(storage)
        assert reloaded.is_settled("1", "2024-01") is True

    def test_survives_restart_with_file_storage(self, tmp_path, make_tx):
        path = str(tmp_path / "ledger.json")
        book = LedgerBook.load(LocalJsonStorage(path=path), default_user_names=["Alice"])
        book.append_transaction(make_tx(250))

        reloaded = LedgerBook.load(LocalJsonStorage(path=path))
        assert len(reloaded.transactions) == 1
        assert reloaded.transactions[0].amount == Decimal("250")


class TestAppend:
    """Tests for append_transaction."""

    def test_append_persists(self, book, storage, make_tx):
        tx = book.append_transaction(make_tx(1000))
        assert book.transactions == (tx,)
        assert storage.save_count == 1
        assert storage.load_state().transactions == [tx]

    def test_unknown_user_rejected(self, book, storage, make_tx):
        with pytest.raises(NotFoundError):
            book.append_transaction(make_tx(10, user_id="ghost"))
        assert book.transactions == ()
        assert storage.save_count == 0

    def test_duplicate_id_rejected(self, book, make_tx):
        book.append_transaction(make_tx(10, id="same"))
        with pytest.raises(DuplicateError):
            book.append_transaction(make_tx(20, id="same"))

    def test_second_interest_for_month_rejected(self, book, make_tx):
        book.append_transaction(interest_tx(make_tx))
        with pytest.raises(DuplicateError, match="already been settled"):
            book.append_transaction(interest_tx(make_tx, amount="1.00"))
        assert len(book.transactions) == 1

    def test_interest_for_other_month_or_user_allowed(self, book, make_tx):
        book.append_transaction(interest_tx(make_tx))
        book.append_transaction(interest_tx(make_tx, month="2024-02"))
        book.append_transaction(interest_tx(make_tx, user_id="2"))
        assert book.is_settled("1", "2024-02")
        assert book.is_settled("2", "2024-01")
        assert not book.is_settled("2", "2024-02")

    def test_snapshot_is_detached(self, book, make_tx):
        snapshot = book.transactions
        book.append_transaction(make_tx(1))
        assert snapshot == ()

    def test_transactions_for_user(self, book, make_tx):
        book.append_transaction(make_tx(1))
        book.append_transaction(make_tx(2, user_id="2"))
        assert [t.amount for t in book.transactions_for("2")] == [Decimal("2")]

    def test_existing_duplicate_in_log_is_kept(self, make_tx):
        state = LedgerState.default(["Alice"])
        state.transactions.extend([
            interest_tx(make_tx, id="a"),
            interest_tx(make_tx, id="b"),
        ])
        book = LedgerBook(state)
        assert len(book.transactions) == 2
        assert book.is_settled("1", "2024-01")


class TestUsers:
    """Tests for add_user and select_user."""

    def test_add_user_selects_it(self, book, storage):
        user = book.add_user("Carol", now=datetime(2024, 2, 1))
        assert book.active_user_id == user.id
        assert book.active_user.name == "Carol"
        assert storage.load_state().active_user_id == user.id

    def test_select_user(self, book, storage):
        book.select_user("2")
        assert book.active_user_id == "2"
        assert storage.load_state().active_user_id == "2"

    def test_select_same_user_does_not_persist(self, book, storage):
        book.select_user("1")
        assert storage.save_count == 0

    def test_select_unknown_user(self, book):
        with pytest.raises(NotFoundError):
            book.select_user("ghost")
        assert book.active_user_id == "1"

    def test_add_user_strips_name(self, book):
        assert book.add_user("  Carol  ").name == "Carol"

    @pytest.mark.parametrize("name", ["", "   ", "n" * 101])
    def test_add_user_rejects_bad_name(self, book, storage, name):
        with pytest.raises(ValueError, match="Account name"):
            book.add_user(name)
        assert len(book.users) == 2
        assert book.active_user_id == "1"
        assert storage.save_count == 0

    def test_add_user_name_at_limit(self, book):
        assert len(book.add_user("n" * 100).name) == 100

    def test_get_user(self, book):
        assert book.get_user("2").name == "Bob"
        assert book.get_user("ghost") is None

    def test_book_without_storage(self, make_tx):
        book = LedgerBook(LedgerState.default(["Solo"]))
        book.append_transaction(make_tx(5))
        assert len(book.transactions) == 1
        assert isinstance(book.to_state(), LedgerState)


def test_in_memory_storage_fixture_is_fresh(storage):
    assert isinstance(storage, InMemoryStorage)
    assert storage.load_state() is None
