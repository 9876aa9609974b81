"""
Data Models Package

This package contains all Pydantic models used in Ledger Guard.
All data flowing through the system must conform to these schemas.
"""

from ledger_guard.models.ledger import (
    LedgerState,
    MonthlyReport,
    Transaction,
    TransactionDraft,
    TransactionType,
    User,
    YearlyMonthColumn,
)
from ledger_guard.models.results import (
    EntryResult,
    SettlementResult,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Ledger models
    "LedgerState",
    "MonthlyReport",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "User",
    "YearlyMonthColumn",
    # Outcome models
    "EntryResult",
    "SettlementResult",
    "ValidationIssue",
    "ValidationResult",
]
