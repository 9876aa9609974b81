"""
Transaction Entry Validation

DESIGN DECISION: User input is validated at the boundary, before a
Transaction is ever constructed. The ledger engine assumes every
transaction in the log is well-formed and never re-checks.

Checks:
- Amount present and greater than zero (sign comes from the type)
- Type is a user-enterable type (interest only comes from settlement)
- Date present and not in the future
- Remarks fit the stored length limit
- Suspicious input (very large amounts, sub-cent precision) is flagged
  as a warning, never silently fixed

IMPORTANT: Validation NEVER raises for bad input.
It reports issues for the user to correct and resubmit.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from ledger_guard.models.ledger import (
    REMARKS_MAX_LENGTH,
    TransactionDraft,
    TransactionType,
)
from ledger_guard.models.results import ValidationIssue, ValidationResult


USER_ENTERABLE_TYPES = frozenset({
    TransactionType.DEPOSIT,
    TransactionType.WITHDRAWAL,
    TransactionType.CORRECTION,
})

LARGE_AMOUNT_WARNING = Decimal("10000000")


class TransactionValidator:
    """Validates transaction drafts entered by the user."""

    def __init__(self, today: Optional[Callable[[], date]] = None):
        """
        Initialize validator.

        Args:
            today: Source of the current date. Defaults to date.today.
        """
        self._today = today or date.today

    def validate(self, draft: TransactionDraft) -> ValidationResult:
        """
        Validate a draft.

        Returns:
            ValidationResult; is_valid is False when any error-level
            issue was found
        """
        issues = []
        issues.extend(self._check_amount(draft))
        issues.extend(self._check_type(draft))
        issues.extend(self._check_date(draft))
        issues.extend(self._check_remarks(draft))

        return ValidationResult(
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
        )

    def _check_amount(self, draft: TransactionDraft) -> list[ValidationIssue]:
        issues = []

        if draft.amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
            return issues

        if not draft.amount.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be a finite number",
                severity="error",
            ))
            return issues

        if draft.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Enter the amount as a positive number; the type sets the direction",
            ))
            return issues

        if draft.amount > LARGE_AMOUNT_WARNING:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({draft.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if draft.amount.as_tuple().exponent < -2:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="precision",
                message=f"Amount ({draft.amount}) has more than two decimal places",
                severity="warning",
            ))

        return issues

    def _check_type(self, draft: TransactionDraft) -> list[ValidationIssue]:
        if draft.type in USER_ENTERABLE_TYPES:
            return []
        return [ValidationIssue(
            field="type",
            issue_type="not_allowed",
            message="Interest can only be posted by settling a month",
            severity="error",
        )]

    def _check_date(self, draft: TransactionDraft) -> list[ValidationIssue]:
        if draft.occurred_on is None:
            return [ValidationIssue(
                field="occurred_on",
                issue_type="missing",
                message="Date is required",
                severity="error",
            )]

        if draft.occurred_on > self._today():
            return [ValidationIssue(
                field="occurred_on",
                issue_type="future_date",
                message=f"Date ({draft.occurred_on}) is in the future",
                severity="error",
                suggested_fix="Pick today or an earlier date",
            )]

        return []

    def _check_remarks(self, draft: TransactionDraft) -> list[ValidationIssue]:
        if len(draft.remarks) <= REMARKS_MAX_LENGTH:
            return []
        return [ValidationIssue(
            field="remarks",
            issue_type="too_long",
            message=f"Remarks are {len(draft.remarks)} characters long",
            severity="error",
            suggested_fix=f"Shorten the remarks to {REMARKS_MAX_LENGTH} characters or fewer",
        )]

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Short text shown next to the entry form."""
        if result.is_valid and not result.warnings:
            return "Transaction recorded."

        lines = []
        if not result.is_valid:
            lines.append("The transaction was not recorded:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"  - {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"    ({issue.suggested_fix})")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please double-check:")
            for warning in result.warnings:
                lines.append(f"  - {warning}")

        return "\n".join(lines)
