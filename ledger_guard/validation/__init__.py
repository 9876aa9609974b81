"""Input validation package."""

from ledger_guard.validation.validator import TransactionValidator

__all__ = ["TransactionValidator"]
