"""
Ledger Book

The single owner of mutable ledger state.

DESIGN DECISION: All state changes go through this class:
- append_transaction (the transaction log is append-only)
- add_user
- select_user

After every change the whole state is persisted. Readers get
snapshots (tuples / copies), and the pure engine functions are fed
those snapshots; the engine never sees the book itself.

The book also keeps a settlement index keyed by (user_id,
settlement_month), updated incrementally on append. It is the last line
of defence against a second INTEREST posting for the same month.
"""

from datetime import datetime
from typing import Optional

from ledger_guard.config import get_settings
from ledger_guard.log import get_logger
from ledger_guard.models.ledger import (
    USER_NAME_MAX_LENGTH,
    LedgerState,
    Transaction,
    TransactionType,
    User,
)
from ledger_guard.services.storage import (
    CorruptStateError,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
)


logger = get_logger(__name__)


class LedgerBook:
    """
    Explicit state container for users, transactions and the selection.

    Usage:
        book = LedgerBook.load(storage)
        book.append_transaction(tx)   # persisted immediately
    """

    def __init__(
        self,
        state: LedgerState,
        storage: Optional[LedgerStorageInterface] = None,
    ):
        self._users: list[User] = list(state.users)
        self._transactions: list[Transaction] = []
        self._settled: set[tuple[str, str]] = set()
        self._active_user_id = state.active_user_id
        self._storage = storage

        # Rebuild the index from the log; a stored duplicate is kept
        # (history is never rewritten) but logged.
        for tx in state.transactions:
            key = self._settlement_key(tx)
            if key is not None and key in self._settled:
                logger.warning(
                    "duplicate_settlement_in_log",
                    user_id=tx.user_id,
                    settlement_month=tx.settlement_month,
                    transaction_id=tx.id,
                )
            self._transactions.append(tx)
            if key is not None:
                self._settled.add(key)

    @classmethod
    def load(
        cls,
        storage: LedgerStorageInterface,
        default_user_names: Optional[list[str]] = None,
    ) -> "LedgerBook":
        """
        Load the book from storage.

        Falls back to the default state (one user per default name, no
        transactions) if nothing is stored or the stored blob is malformed.
        A malformed blob is copied aside first, since the next save
        replaces it.
        """
        try:
            state = storage.load_state()
        except CorruptStateError as e:
            backup = storage.backup_corrupt()
            logger.error("state_load_failed", error=str(e), backup=backup)
            state = None

        if state is None:
            names = default_user_names or get_settings().ledger.default_users_list
            state = LedgerState.default(names)
            logger.info("state_initialized", users=len(state.users))

        return cls(state, storage)

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    @property
    def users(self) -> tuple[User, ...]:
        return tuple(self._users)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Snapshot of the whole log, in append order."""
        return tuple(self._transactions)

    @property
    def active_user_id(self) -> Optional[str]:
        return self._active_user_id

    @property
    def active_user(self) -> Optional[User]:
        return self.get_user(self._active_user_id) if self._active_user_id else None

    def get_user(self, user_id: str) -> Optional[User]:
        for user in self._users:
            if user.id == user_id:
                return user
        return None

    def transactions_for(self, user_id: str) -> tuple[Transaction, ...]:
        return tuple(t for t in self._transactions if t.user_id == user_id)

    def is_settled(self, user_id: str, settlement_month: str) -> bool:
        """Index lookup: has interest been posted for this user and month?"""
        return (user_id, settlement_month) in self._settled

    def to_state(self) -> LedgerState:
        return LedgerState(
            users=list(self._users),
            transactions=list(self._transactions),
            active_user_id=self._active_user_id,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def append_transaction(self, transaction: Transaction) -> Transaction:
        """
        Append to the log and persist.

        Raises:
            NotFoundError: If the transaction's user does not exist
            DuplicateError: If it is an INTEREST posting for a month that
                            already has one, or reuses an existing ID
        """
        if self.get_user(transaction.user_id) is None:
            raise NotFoundError(f"Unknown user: {transaction.user_id}")

        if any(t.id == transaction.id for t in self._transactions):
            raise DuplicateError(f"Transaction ID already exists: {transaction.id}")

        key = self._settlement_key(transaction)
        if key is not None and key in self._settled:
            raise DuplicateError(
                f"Interest for {transaction.settlement_month} has already been "
                f"settled for user {transaction.user_id}"
            )

        self._transactions.append(transaction)
        if key is not None:
            self._settled.add(key)

        logger.info(
            "transaction_appended",
            transaction_id=transaction.id,
            user_id=transaction.user_id,
            type=transaction.type.value,
            amount=str(transaction.amount),
        )
        self._persist()
        return transaction

    def add_user(self, name: str, now: Optional[datetime] = None) -> User:
        """
        Create a user, select it and persist.

        Raises:
            ValueError: If the name is blank or longer than
                        USER_NAME_MAX_LENGTH characters
        """
        name = name.strip()
        if not name:
            raise ValueError("Account name is required")
        if len(name) > USER_NAME_MAX_LENGTH:
            raise ValueError(
                f"Account name must be at most {USER_NAME_MAX_LENGTH} characters"
            )

        user = User(name=name, created_at=now or datetime.now())
        self._users.append(user)
        self._active_user_id = user.id

        logger.info("user_added", user_id=user.id)
        self._persist()
        return user

    def select_user(self, user_id: str) -> User:
        """
        Make a user the active one and persist.

        Raises:
            NotFoundError: If no such user exists
        """
        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError(f"Unknown user: {user_id}")

        if user_id != self._active_user_id:
            self._active_user_id = user_id
            logger.debug("user_selected", user_id=user_id)
            self._persist()
        return user

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _settlement_key(transaction: Transaction) -> Optional[tuple[str, str]]:
        if transaction.type != TransactionType.INTEREST or not transaction.settlement_month:
            return None
        return transaction.user_id, transaction.settlement_month

    def _persist(self) -> None:
        if self._storage is not None:
            self._storage.save_state(self.to_state())
