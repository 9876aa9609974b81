"""
In-Memory Storage

Keeps the serialized blob in a dict. The state still goes through
JSON serialization, so tests exercise the same round trip as the file
store.
"""

from typing import Optional

from pydantic import ValidationError

from ledger_guard.models.ledger import LedgerState
from ledger_guard.services.storage.interface import (
    CorruptStateError,
    LedgerStorageInterface,
)


class InMemoryStorage(LedgerStorageInterface):
    """Ledger storage that lives only as long as the process."""

    def __init__(self, storage_key: str = "ledger_guard_db"):
        self._key = storage_key
        self.blobs: dict[str, str] = {}
        self.save_count = 0

    def load_state(self) -> Optional[LedgerState]:
        blob = self.blobs.get(self._key)
        if blob is None:
            return None
        try:
            return LedgerState.model_validate_json(blob)
        except ValidationError as e:
            raise CorruptStateError(f"Stored ledger is malformed: {e.error_count()} error(s)")

    def save_state(self, state: LedgerState) -> bool:
        self.blobs[self._key] = state.model_dump_json(by_alias=True)
        self.save_count += 1
        return True

    def clear(self) -> None:
        self.blobs.pop(self._key, None)

    def backup_corrupt(self) -> Optional[str]:
        blob = self.blobs.get(self._key)
        if blob is None:
            return None
        backup_key = f"{self._key}.corrupt"
        self.blobs[backup_key] = blob
        return backup_key
