"""
Local JSON File Storage

DESIGN DECISION: A single JSON file on disk acts as a small key-value
store. The ledger state is serialized to a JSON string and kept under
one fixed key, so other keys in the same file are left alone.

TRADEOFFS:
- Whole-state rewrite on every change (fine for a personal ledger)
- Writes go to a temporary file first and are swapped in with
  os.replace, so a crash never leaves a half-written ledger
- Transient OS errors on write are retried
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ledger_guard.config import get_settings
from ledger_guard.log import get_logger
from ledger_guard.models.ledger import LedgerState
from ledger_guard.services.storage.interface import (
    CorruptStateError,
    LedgerStorageInterface,
    StorageError,
)


logger = get_logger(__name__)


class LocalJsonStorage(LedgerStorageInterface):
    """
    Ledger storage backed by a local JSON file.

    File layout: {"<storage_key>": "<serialized LedgerState>", ...}
    """

    def __init__(
        self,
        path: Optional[str] = None,
        storage_key: Optional[str] = None,
    ):
        settings = get_settings().ledger
        self._path = Path(path or settings.storage_path)
        self._key = storage_key or settings.storage_key

    @property
    def path(self) -> Path:
        return self._path

    def _read_store(self) -> dict:
        """Read the whole key-value file. A missing file is an empty store."""
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        if not raw.strip():
            return {}
        try:
            store = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStateError(f"{self._path} is not valid JSON: {e}")
        if not isinstance(store, dict):
            raise CorruptStateError(f"{self._path} does not hold a key-value object")
        return store

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    def _write_store(self, store: dict) -> None:
        """Atomically replace the file contents."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(store, handle, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def load_state(self) -> Optional[LedgerState]:
        store = self._read_store()
        blob = store.get(self._key)
        if blob is None:
            return None

        try:
            if isinstance(blob, str):
                state = LedgerState.model_validate_json(blob)
            else:
                state = LedgerState.model_validate(blob)
        except ValidationError as e:
            raise CorruptStateError(
                f"Stored ledger under {self._key!r} is malformed: {e.error_count()} error(s)"
            )

        logger.debug(
            "state_loaded",
            path=str(self._path),
            users=len(state.users),
            transactions=len(state.transactions),
        )
        return state

    def save_state(self, state: LedgerState) -> bool:
        try:
            store = self._read_store()
        except CorruptStateError:
            # The file is rewritten from scratch; nothing valid to preserve.
            store = {}

        store[self._key] = state.model_dump_json(by_alias=True)

        try:
            self._write_store(store)
        except OSError as e:
            logger.error("state_save_failed", path=str(self._path), error=str(e))
            raise StorageError(f"Failed to write {self._path}: {e}")

        logger.debug(
            "state_saved",
            path=str(self._path),
            transactions=len(state.transactions),
        )
        return True

    def clear(self) -> None:
        try:
            store = self._read_store()
        except CorruptStateError:
            store = {}
        if self._key in store:
            del store[self._key]
            try:
                self._write_store(store)
            except OSError as e:
                logger.error("state_clear_failed", path=str(self._path), error=str(e))
                raise StorageError(f"Failed to write {self._path}: {e}")

    def backup_corrupt(self) -> Optional[str]:
        """
        Keep a malformed blob under "<key>.corrupt" in the same file.

        If the file itself is not a JSON object, the raw file is copied
        to "<path>.corrupt" instead.
        """
        try:
            store = self._read_store()
        except CorruptStateError:
            backup = self._path.with_name(f"{self._path.name}.corrupt")
            try:
                backup.write_bytes(self._path.read_bytes())
            except OSError as e:
                raise StorageError(f"Failed to back up {self._path}: {e}")
            logger.warning("corrupt_file_backed_up", backup=str(backup))
            return str(backup)

        blob = store.get(self._key)
        if blob is None:
            return None

        backup_key = f"{self._key}.corrupt"
        store[backup_key] = blob
        try:
            self._write_store(store)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")
        logger.warning("corrupt_state_backed_up", path=str(self._path), key=backup_key)
        return backup_key
