"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the ledger book decoupled from the file format
2. Use in-memory storage for testing
3. Swap the local file for another local store later

The ledger is persisted wholesale: one blob holding users, the
transaction log and the active user, stored under a fixed key.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ledger_guard.models.ledger import LedgerState


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger state persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load_state(self) -> Optional[LedgerState]:
        """
        Load the persisted ledger state.

        Returns:
            The stored state, or None if nothing has been stored yet

        Raises:
            CorruptStateError: If a blob exists but cannot be parsed
            StorageError: If the store cannot be read
        """
        pass

    @abstractmethod
    def save_state(self, state: LedgerState) -> bool:
        """
        Persist the full ledger state, replacing the previous blob.

        Args:
            state: The state to store

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored blob (the next load starts from scratch)."""
        pass

    @abstractmethod
    def backup_corrupt(self) -> Optional[str]:
        """
        Copy an unreadable blob aside before it is replaced.

        Returns:
            Where the copy was kept, or None if there was nothing to keep

        Raises:
            StorageError: If the copy cannot be written
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptStateError(StorageError):
    """A stored blob exists but is not a valid ledger state."""
    pass


class NotFoundError(StorageError):
    """Entity not found in the ledger."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
