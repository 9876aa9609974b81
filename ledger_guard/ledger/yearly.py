"""
Yearly Spreadsheet View

Twelve columns (January..December) for one user and one year, laid out
the way a paper ledger would be: opening balance, each deposit or
withdrawal, income and expense subtotals, interest, the month's net
movement and the closing balance.

Unlike monthly_reports, each column's opening balance is recomputed
from the full log (everything strictly before the month starts), so a
year can be viewed without walking every earlier month.
"""

from datetime import datetime
from typing import Iterable, Optional

from ledger_guard.ledger.engine import Clock, month_key, month_window
from ledger_guard.models.ledger import (
    ZERO,
    Transaction,
    TransactionType,
    YearlyMonthColumn,
    to_local_naive,
)


def yearly_overview(
    transactions: Iterable[Transaction],
    user_id: str,
    year: int,
) -> list[YearlyMonthColumn]:
    """Build the twelve month columns of a year for one user."""
    user_txs = sorted(
        (t for t in transactions if t.user_id == user_id),
        key=lambda t: t.timestamp,
    )

    columns = []
    for month_index in range(12):
        start, end = month_window(year, month_index)

        opening_balance = sum(
            (t.amount for t in user_txs if t.timestamp < start),
            ZERO,
        )
        in_month = [t for t in user_txs if start <= t.timestamp <= end]
        movements = [t for t in in_month if t.type != TransactionType.INTEREST]

        income = sum((t.amount for t in movements if t.amount > 0), ZERO)
        expense = sum((t.amount for t in movements if t.amount < 0), ZERO)
        interest = sum(
            (t.amount for t in in_month if t.type == TransactionType.INTEREST),
            ZERO,
        )
        monthly_total = income + expense + interest

        columns.append(YearlyMonthColumn(
            month=month_key(year, month_index),
            opening_balance=opening_balance,
            transactions=movements,
            income_subtotal=income,
            expense_subtotal=expense,
            interest_amount=interest,
            monthly_total=monthly_total,
            closing_balance=opening_balance + monthly_total,
        ))

    return columns


def available_years(
    transactions: Iterable[Transaction],
    user_id: str,
    clock: Optional[Clock] = None,
) -> list[int]:
    """The current year plus every year with activity, newest first."""
    now = to_local_naive((clock or datetime.now)())
    years = {now.year}
    years.update(t.timestamp.year for t in transactions if t.user_id == user_id)
    return sorted(years, reverse=True)


def max_transaction_rows(columns: list[YearlyMonthColumn], minimum: int = 5) -> int:
    """Number of detail rows the spreadsheet needs (never fewer than minimum)."""
    return max([minimum] + [len(column.transactions) for column in columns])
