"""
Outcome Models

Returned by the validator and the flows. User-facing failures
(a future date, a month that is already settled) are reported through
these models rather than raised.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ledger_guard.models.ledger import Transaction


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'future_date', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """Result of validating a transaction draft."""

    validated_at: datetime = Field(
        default_factory=datetime.now
    )
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]


class EntryResult(BaseModel):
    """Outcome of recording a user-entered transaction."""

    success: bool
    message: str
    validation: ValidationResult
    transaction: Optional[Transaction] = None


class SettlementResult(BaseModel):
    """
    Outcome of a settlement request.

    success is False when the month was already settled; in that case
    transaction is None and nothing was appended.
    """

    success: bool
    month: str
    message: str
    transaction: Optional[Transaction] = None
