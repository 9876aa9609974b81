"""
Main Orchestrator for Ledger Guard

This module ties together the ledger book, the validator and the pure
ledger engine, and defines the two end-to-end flows:
1. Entry (draft -> validate -> sign -> append)
2. Settlement (guard -> compute interest -> append)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is appended without passing validation
- Interest is never posted twice for the same user and month
- Every state change is logged

User mistakes come back as result objects with a message; they are
not exceptions.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from ledger_guard.book import LedgerBook
from ledger_guard.config import get_settings
from ledger_guard.ledger import (
    Clock,
    can_settle,
    interest_for,
    month_key,
    monthly_reports,
    parse_month_key,
    settlement_timestamp,
)
from ledger_guard.log import get_logger
from ledger_guard.models.ledger import (
    MonthlyReport,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from ledger_guard.models.results import EntryResult, SettlementResult
from ledger_guard.services.storage import LedgerStorageInterface, LocalJsonStorage
from ledger_guard.validation import TransactionValidator


logger = get_logger(__name__)


class TransactionEntryFlow:
    """
    Records deposits, withdrawals and corrections entered by the user.

    Flow:
    1. Validate the draft (positive amount, no future date)
    2. Derive the signed amount from the type
    3. Append to the book (persisted immediately)
    """

    def __init__(
        self,
        book: LedgerBook,
        validator: Optional[TransactionValidator] = None,
    ):
        self._book = book
        self._validator = validator or TransactionValidator()

    def record(
        self,
        draft: TransactionDraft,
        user_id: Optional[str] = None,
    ) -> EntryResult:
        """
        Record a draft for a user (the active user by default).

        Returns:
            EntryResult; success is False if validation failed or no
            user is selected
        """
        user_id = user_id or self._book.active_user_id
        validation = self._validator.validate(draft)

        if user_id is None:
            return EntryResult(
                success=False,
                message="No account selected",
                validation=validation,
            )

        if not validation.is_valid:
            logger.info(
                "entry_rejected",
                user_id=user_id,
                issues=[issue.issue_type for issue in validation.issues],
            )
            return EntryResult(
                success=False,
                message=self._validator.get_user_friendly_summary(validation),
                validation=validation,
            )

        transaction = Transaction(
            user_id=user_id,
            amount=draft.signed_amount,
            type=draft.type,
            timestamp=datetime.combine(draft.occurred_on, time.min),
            remarks=draft.remarks,
        )
        self._book.append_transaction(transaction)

        return EntryResult(
            success=True,
            message=self._validator.get_user_friendly_summary(validation),
            validation=validation,
            transaction=transaction,
        )

    def record_values(
        self,
        amount: Decimal,
        transaction_type: TransactionType,
        remarks: str,
        occurred_on: date,
        is_outflow: bool = False,
        user_id: Optional[str] = None,
    ) -> EntryResult:
        """Convenience wrapper for form handlers."""
        draft = TransactionDraft(
            amount=amount,
            type=transaction_type,
            remarks=remarks,
            occurred_on=occurred_on,
            is_outflow=is_outflow,
        )
        return self.record(draft, user_id=user_id)


class SettlementFlow:
    """
    Posts monthly interest.

    CRITICAL: The settlement guard is checked before anything is built.
    A month that already carries an INTEREST transaction is rejected
    with a message and nothing is appended.
    """

    def __init__(
        self,
        book: LedgerBook,
        annual_rate: Optional[Decimal] = None,
        clock: Optional[Clock] = None,
    ):
        self._book = book
        self._annual_rate = (
            annual_rate if annual_rate is not None else get_settings().ledger.annual_rate
        )
        self._clock = clock

    @property
    def annual_rate(self) -> Decimal:
        return self._annual_rate

    def reports(self, user_id: Optional[str] = None) -> list[MonthlyReport]:
        """Monthly reports for a user (the active user by default)."""
        user_id = user_id or self._book.active_user_id
        if user_id is None:
            return []
        return monthly_reports(self._book.transactions, user_id, clock=self._clock)

    def settle(
        self,
        month: str,
        user_id: Optional[str] = None,
    ) -> SettlementResult:
        """
        Settle interest for a YYYY-MM month.

        The interest base is the month's pre-interest balance taken from
        the current monthly report.
        """
        user_id = user_id or self._book.active_user_id
        if user_id is None:
            return SettlementResult(
                success=False,
                month=month,
                message="No account selected",
            )

        year, month_index = parse_month_key(month)
        month = month_key(year, month_index)

        if not can_settle(self._book.transactions, user_id, year, month_index):
            logger.warning(
                "duplicate_settlement_rejected",
                user_id=user_id,
                settlement_month=month,
            )
            return SettlementResult(
                success=False,
                month=month,
                message=f"Interest for {month} has already been settled.",
            )

        report = next((r for r in self.reports(user_id) if r.month == month), None)
        if report is None:
            return SettlementResult(
                success=False,
                month=month,
                message=f"There is no ledger activity covering {month}.",
            )

        amount = interest_for(report, self._annual_rate)
        transaction = Transaction(
            id=f"INT-{month}-{user_id}",
            user_id=user_id,
            amount=amount,
            type=TransactionType.INTEREST,
            timestamp=settlement_timestamp(year, month_index),
            remarks=f"Interest settlement: {month}",
            settlement_month=month,
        )
        self._book.append_transaction(transaction)

        logger.info(
            "interest_settled",
            user_id=user_id,
            settlement_month=month,
            base=str(report.balance_before_interest),
            amount=str(amount),
        )
        return SettlementResult(
            success=True,
            month=month,
            message=f"Interest of {amount:,.2f} posted for {month}.",
            transaction=transaction,
        )


def create_app_components(
    storage: Optional[LedgerStorageInterface] = None,
    clock: Optional[Clock] = None,
) -> tuple[LedgerBook, TransactionEntryFlow, SettlementFlow]:
    """
    Factory function to create all application components.

    Args:
        storage: Storage backend. Defaults to the configured local JSON file.
        clock: Source of the current time for reports.

    Returns:
        (book, entry_flow, settlement_flow)
    """
    storage = storage or LocalJsonStorage()
    book = LedgerBook.load(storage)

    today = None
    if clock is not None:
        def today() -> date:
            return clock().date()

    entry_flow = TransactionEntryFlow(book, TransactionValidator(today=today))
    settlement_flow = SettlementFlow(book, clock=clock)

    return book, entry_flow, settlement_flow
