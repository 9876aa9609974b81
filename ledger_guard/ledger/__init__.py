"""Ledger engine package: pure functions over transaction snapshots."""

from ledger_guard.ledger.engine import (
    Clock,
    balance_at,
    can_settle,
    current_month_stats,
    interest_for,
    iter_months,
    month_key,
    month_window,
    monthly_reports,
    next_month,
    parse_month_key,
    settlement_timestamp,
)
from ledger_guard.ledger.yearly import (
    available_years,
    max_transaction_rows,
    yearly_overview,
)

__all__ = [
    # Core operations
    "balance_at",
    "can_settle",
    "monthly_reports",
    # Settlement helpers
    "interest_for",
    "settlement_timestamp",
    "current_month_stats",
    # Month helpers
    "Clock",
    "iter_months",
    "month_key",
    "month_window",
    "next_month",
    "parse_month_key",
    # Yearly view
    "available_years",
    "max_transaction_rows",
    "yearly_overview",
]
