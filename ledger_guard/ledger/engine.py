"""
Ledger Engine

DESIGN DECISION: Every function here is PURE.
Input is a snapshot of the transaction log, output is a derived value.
Nothing is cached, nothing is mutated, no clock is read unless one is
passed in (the default clock is datetime.now).

Months are addressed as (year, month_index) with a zero-based month
index, and keyed as "YYYY-MM" with a one-based, zero-padded month.

Interest is simple monthly interest on the post-activity, pre-interest
balance of the month:

    interest = (opening + deposits - withdrawals) * annual_rate / 12
"""

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, Iterator, Optional

from ledger_guard.models.ledger import (
    ZERO,
    MonthlyReport,
    Transaction,
    TransactionType,
    to_local_naive,
)


Clock = Callable[[], datetime]

CENT = Decimal("0.01")


# =============================================================================
# MONTH HELPERS
# =============================================================================

def month_key(year: int, month_index: int) -> str:
    """Format a zero-based month index as YYYY-MM."""
    return f"{year:04d}-{month_index + 1:02d}"


def parse_month_key(key: str) -> tuple[int, int]:
    """Inverse of month_key: "2024-01" -> (2024, 0)."""
    year, month = key.split("-")
    return int(year), int(month) - 1


def next_month(year: int, month_index: int) -> tuple[int, int]:
    """Advance one calendar month, rolling December into January."""
    if month_index >= 11:
        return year + 1, 0
    return year, month_index + 1


def month_window(year: int, month_index: int) -> tuple[datetime, datetime]:
    """
    First and last instant of a month in local time.

    The window is [1st 00:00:00.000, last day 23:59:59.999], inclusive
    at both ends.
    """
    start = datetime(year, month_index + 1, 1)
    following_year, following_month = next_month(year, month_index)
    end = datetime(following_year, following_month + 1, 1) - timedelta(milliseconds=1)
    return start, end


def iter_months(
    start: tuple[int, int],
    end: tuple[int, int],
) -> Iterator[tuple[int, int]]:
    """Yield every (year, month_index) from start through end inclusive."""
    year, month_index = start
    while (year, month_index) <= end:
        yield year, month_index
        year, month_index = next_month(year, month_index)


def _user_transactions(
    transactions: Iterable[Transaction],
    user_id: str,
) -> list[Transaction]:
    return [t for t in transactions if t.user_id == user_id]


# =============================================================================
# BALANCE
# =============================================================================

def balance_at(
    transactions: Iterable[Transaction],
    user_id: str,
    cutoff: Optional[datetime] = None,
) -> Decimal:
    """
    Sum of the user's amounts up to and including cutoff.

    Without a cutoff every transaction of the user counts.
    A user with no transactions has a balance of zero.
    """
    if cutoff is not None:
        cutoff = to_local_naive(cutoff)
    return sum(
        (
            t.amount
            for t in transactions
            if t.user_id == user_id and (cutoff is None or t.timestamp <= cutoff)
        ),
        ZERO,
    )


# =============================================================================
# MONTHLY REPORTS
# =============================================================================

def _summarize_month(
    month_transactions: list[Transaction],
    month: str,
    opening_balance: Decimal,
) -> MonthlyReport:
    deposits = ZERO
    withdrawals = ZERO
    interest_tx = None

    for t in month_transactions:
        if t.type == TransactionType.DEPOSIT or (
            t.type == TransactionType.CORRECTION and t.amount > 0
        ):
            deposits += t.amount
        elif t.type == TransactionType.WITHDRAWAL or (
            t.type == TransactionType.CORRECTION and t.amount < 0
        ):
            withdrawals += abs(t.amount)
        elif t.type == TransactionType.INTEREST and interest_tx is None:
            interest_tx = t

    interest = interest_tx.amount if interest_tx is not None else ZERO

    return MonthlyReport(
        month=month,
        opening_balance=opening_balance,
        deposits=deposits,
        withdrawals=withdrawals,
        interest=interest,
        closing_balance=opening_balance + deposits - withdrawals + interest,
        is_settled=interest_tx is not None,
    )


def monthly_reports(
    transactions: Iterable[Transaction],
    user_id: str,
    clock: Optional[Clock] = None,
) -> list[MonthlyReport]:
    """
    One report per calendar month, oldest first.

    Covers every month from the user's first transaction through the
    clock's current month, including months without activity. Each
    month opens with the previous month's closing balance.

    Returns an empty list for a user without transactions.
    """
    user_txs = sorted(
        _user_transactions(transactions, user_id),
        key=lambda t: t.timestamp,
    )
    if not user_txs:
        return []

    now = to_local_naive((clock or datetime.now)())
    first = user_txs[0].timestamp

    reports = []
    running_balance = ZERO

    for year, month_index in iter_months(
        (first.year, first.month - 1),
        (now.year, now.month - 1),
    ):
        start, end = month_window(year, month_index)
        in_month = [t for t in user_txs if start <= t.timestamp <= end]

        report = _summarize_month(
            in_month,
            month_key(year, month_index),
            running_balance,
        )
        reports.append(report)
        running_balance = report.closing_balance

    return reports


def current_month_stats(
    reports: list[MonthlyReport],
    clock: Optional[Clock] = None,
) -> MonthlyReport:
    """
    The newest report, or an empty report for the current month when
    the user has no history yet.
    """
    if reports:
        return reports[-1]
    now = to_local_naive((clock or datetime.now)())
    return MonthlyReport(month=month_key(now.year, now.month - 1))


# =============================================================================
# SETTLEMENT
# =============================================================================

def can_settle(
    transactions: Iterable[Transaction],
    user_id: str,
    year: int,
    month_index: int,
) -> bool:
    """
    Whether interest may still be posted for the given month.

    False iff an INTEREST transaction for (user_id, YYYY-MM) already
    exists. This is only a verdict; callers must check it before
    appending.
    """
    key = month_key(year, month_index)
    return not any(
        t.user_id == user_id
        and t.type == TransactionType.INTEREST
        and t.settlement_month == key
        for t in transactions
    )


def interest_for(report: MonthlyReport, annual_rate: Decimal) -> Decimal:
    """
    Interest earned by a month, rounded to cents.

    A negative pre-interest balance earns nothing; interest postings
    are never negative.
    """
    base = report.balance_before_interest
    if base <= 0:
        return ZERO.quantize(CENT)
    return (base * annual_rate / 12).quantize(CENT, rounding=ROUND_HALF_UP)


def settlement_timestamp(year: int, month_index: int) -> datetime:
    """Interest is dated to the last instant of its month."""
    return month_window(year, month_index)[1]
