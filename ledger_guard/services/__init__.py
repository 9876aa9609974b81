"""Services package."""

from ledger_guard.services.storage import (
    CorruptStateError,
    DuplicateError,
    InMemoryStorage,
    LedgerStorageInterface,
    LocalJsonStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Storage services
    "CorruptStateError",
    "DuplicateError",
    "InMemoryStorage",
    "LedgerStorageInterface",
    "LocalJsonStorage",
    "NotFoundError",
    "StorageError",
]
