"""
Core Data Models for Ledger Guard

These models define the strict schemas for the ledger:
1. Transaction - one immutable monetary event
2. User - an account holder
3. MonthlyReport / YearlyMonthColumn - derived, never stored
4. LedgerState - the single persisted blob

DESIGN DECISION: Python attributes are snake_case, but the serialized
form uses camelCase aliases (userId, settlementMonth, activeUserId...).
The persisted blob therefore keeps one stable shape regardless of which
side wrote it.

All amounts are Decimal. Timestamps are naive local datetimes because
monthly bucketing happens in local time.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


SETTLEMENT_MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

ZERO = Decimal("0")

USER_NAME_MAX_LENGTH = 100
REMARKS_MAX_LENGTH = 500


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def _new_id() -> str:
    return uuid4().hex


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """
    Kinds of ledger movements.

    DEPOSIT and WITHDRAWAL come from the user, INTEREST only from
    settlement. CORRECTION is classified as inflow or outflow by its sign.
    """
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    INTEREST = "INTEREST"
    CORRECTION = "CORRECTION"


class _LedgerModel(BaseModel):
    """Shared config: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# STORED RECORDS
# =============================================================================

class User(_LedgerModel):
    """An account holder."""

    id: str = Field(
        default_factory=_new_id,
        min_length=1,
        description="Unique user ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=USER_NAME_MAX_LENGTH,
        description="Display name"
    )
    created_at: datetime = Field(
        default_factory=datetime.now,
        description="When the account holder was added"
    )

    @field_validator('created_at', mode='before')
    @classmethod
    def parse_epoch_millis(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return datetime.fromtimestamp(v / 1000)
        return v

    @field_validator('created_at')
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return to_local_naive(v)


class Transaction(_LedgerModel):
    """
    One monetary event on a user's account.

    CRITICAL: Transactions are immutable. There is no update or delete;
    mistakes are fixed by appending a CORRECTION.

    Sign convention: positive = inflow, negative = outflow.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=_new_id,
        min_length=1,
        description="Unique transaction ID"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Owning account ID"
    )
    amount: Decimal = Field(
        ...,
        description="Signed amount (positive = inflow, negative = outflow)"
    )
    type: TransactionType
    timestamp: datetime = Field(
        ...,
        description="When the movement happened (naive local time)"
    )
    remarks: str = Field(
        default="",
        max_length=REMARKS_MAX_LENGTH,
    )
    settlement_month: Optional[str] = Field(
        default=None,
        description="YYYY-MM, only on INTEREST transactions"
    )

    @field_validator('timestamp', mode='before')
    @classmethod
    def parse_epoch_millis(cls, v: Any) -> Any:
        """Accept millisecond epoch integers from older blobs."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return datetime.fromtimestamp(v / 1000)
        return v

    @field_validator('timestamp')
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return to_local_naive(v)

    @field_validator('settlement_month')
    @classmethod
    def validate_settlement_month(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not SETTLEMENT_MONTH_PATTERN.match(v):
            raise ValueError(f"Settlement month must be YYYY-MM, got {v!r}")
        return v

    @model_validator(mode='after')
    def validate_interest_fields(self) -> 'Transaction':
        """settlement_month belongs to INTEREST and only to INTEREST."""
        if self.type == TransactionType.INTEREST:
            if self.settlement_month is None:
                raise ValueError("Interest transactions require a settlement month")
        elif self.settlement_month is not None:
            raise ValueError("Only interest transactions carry a settlement month")
        return self

    @property
    def is_inflow(self) -> bool:
        return self.amount > 0


class LedgerState(_LedgerModel):
    """
    Everything that is persisted: users, the transaction log and the
    selected user. Serialized wholesale as one blob.
    """

    users: list[User] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    active_user_id: Optional[str] = None

    @model_validator(mode='after')
    def default_active_user(self) -> 'LedgerState':
        """Fall back to the first user when the selection is missing or stale."""
        user_ids = {user.id for user in self.users}
        if self.active_user_id not in user_ids:
            self.active_user_id = self.users[0].id if self.users else None
        return self

    @classmethod
    def default(
        cls,
        user_names: list[str],
        now: Optional[datetime] = None,
    ) -> 'LedgerState':
        """
        First-run state: one user per name with ids "1", "2", ...,
        an empty ledger and the first user selected.
        """
        created_at = now or datetime.now()
        users = [
            User(id=str(index), name=name, created_at=created_at)
            for index, name in enumerate(user_names, start=1)
        ]
        return cls(
            users=users,
            transactions=[],
            active_user_id=users[0].id if users else None,
        )


# =============================================================================
# DERIVED REPORTS - recomputed on every query, never stored
# =============================================================================

class MonthlyReport(_LedgerModel):
    """
    Summary of one calendar month for one user.

    closing_balance = opening_balance + deposits - withdrawals + interest
    """

    model_config = ConfigDict(frozen=True)

    month: str = Field(
        ...,
        pattern=r"^\d{4}-(0[1-9]|1[0-2])$",
        description="YYYY-MM"
    )
    opening_balance: Decimal = ZERO
    deposits: Decimal = Field(
        default=ZERO,
        description="Deposits plus positive corrections"
    )
    withdrawals: Decimal = Field(
        default=ZERO,
        description="Magnitude of withdrawals plus negative corrections"
    )
    interest: Decimal = ZERO
    closing_balance: Decimal = ZERO
    is_settled: bool = False

    @property
    def balance_before_interest(self) -> Decimal:
        """The base that interest is computed on."""
        return self.opening_balance + self.deposits - self.withdrawals

    @property
    def year(self) -> int:
        return int(self.month[:4])

    @property
    def month_index(self) -> int:
        """Zero-based month (January = 0)."""
        return int(self.month[5:7]) - 1


class YearlyMonthColumn(_LedgerModel):
    """
    One column of the yearly spreadsheet view.

    Income and expense subtotals cover non-interest transactions only;
    the expense subtotal keeps its negative sign.
    """

    model_config = ConfigDict(frozen=True)

    month: str
    opening_balance: Decimal = ZERO
    transactions: list[Transaction] = Field(default_factory=list)
    income_subtotal: Decimal = ZERO
    expense_subtotal: Decimal = ZERO
    interest_amount: Decimal = ZERO
    monthly_total: Decimal = ZERO
    closing_balance: Decimal = ZERO


class TransactionDraft(BaseModel):
    """
    Raw user input for a new deposit, withdrawal or correction.

    This is PROPOSED data, NOT validated. Amount is always entered as a
    positive magnitude; the sign is derived from the type (and the
    direction for corrections).
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Optional[Decimal] = None
    type: TransactionType = TransactionType.DEPOSIT
    occurred_on: Optional[date] = None
    remarks: str = ""
    is_outflow: bool = Field(
        default=False,
        description="Direction of a correction (ignored for other types)"
    )

    @property
    def signed_amount(self) -> Optional[Decimal]:
        if self.amount is None:
            return None
        if self.type == TransactionType.WITHDRAWAL:
            return -self.amount
        if self.type == TransactionType.CORRECTION and self.is_outflow:
            return -self.amount
        return self.amount
