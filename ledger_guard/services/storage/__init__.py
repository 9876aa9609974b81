"""
Storage Services Package

Provides the abstract interface and the local implementations for
ledger persistence. Nothing here talks to the network.
"""

from ledger_guard.services.storage.interface import (
    CorruptStateError,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)
from ledger_guard.services.storage.local_json import LocalJsonStorage
from ledger_guard.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "CorruptStateError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "LocalJsonStorage",
]
