"""
Boundary Validation for User Input

DESIGN DECISION: The ledger engine assumes validated input.
Raw values coming from a form or a CLI (strings, floats, loose dates)
are parsed and checked here, before they reach any ledger function.

Checks:
- Required field presence
- Amount format and sign (principal > 0, interest >= 0, payments > 0)
- Date format
- Enumerated values (borrower kind, term)
- Repayment day range (1-31)

IMPORTANT: Validation NEVER silently fixes issues.
All issues are collected and reported together in one ValidationError.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from loan_ledger.ledger.errors import ValidationError
from loan_ledger.models.loan import (
    BorrowerKind,
    LoanTerm,
    LoanTerms,
    ValidationIssue,
    ensure_utc,
)


class LoanInputValidator:
    """
    Parses raw user input into the typed values the ledger expects.

    Each parse_* method raises ValidationError on its own.
    validate_terms collects issues across all fields first.
    """

    def parse_amount(
        self,
        value: Any,
        field: str = "amount",
        allow_zero: bool = False,
    ) -> Decimal:
        """
        Parse a monetary amount.

        Floats go through str() so 0.1 stays 0.1 instead of its binary expansion.
        """
        amount, issue = self._amount_or_issue(value, field, allow_zero)
        if issue:
            raise ValidationError.from_issues([issue])
        return amount

    def parse_date(self, value: Any, field: str = "date") -> datetime:
        """Parse an ISO date or datetime. Naive values are taken as UTC."""
        parsed, issue = self._date_or_issue(value, field)
        if issue:
            raise ValidationError.from_issues([issue])
        return parsed

    def parse_repayment_day(self, value: Any) -> Optional[int]:
        day, issue = self._repayment_day_or_issue(value)
        if issue:
            raise ValidationError.from_issues([issue])
        return day

    def validate_terms(self, raw: Mapping[str, Any]) -> LoanTerms:
        """
        Validate a full set of loan terms.

        Expected keys: borrower_name, principal, total_interest_expected,
        start_date, and optionally borrower_kind, term, repayment_due_day.

        Raises:
            ValidationError: With every issue found
        """
        issues: list[ValidationIssue] = []

        name = raw.get("borrower_name")
        if name is None or not str(name).strip():
            issues.append(ValidationIssue(
                field="borrower_name",
                issue_type="missing",
                message="Borrower name is required",
                suggested_fix="Enter the borrower's name",
            ))
        elif len(str(name).strip()) > 200:
            issues.append(ValidationIssue(
                field="borrower_name",
                issue_type="invalid_value",
                message="Borrower name must be at most 200 characters",
            ))

        principal, issue = self._amount_or_issue(raw.get("principal"), "principal", allow_zero=False)
        if issue:
            issues.append(issue)

        interest_raw = raw.get("total_interest_expected")
        if interest_raw is None or (isinstance(interest_raw, str) and not interest_raw.strip()):
            interest, issue = Decimal("0"), None
        else:
            interest, issue = self._amount_or_issue(
                interest_raw, "total_interest_expected", allow_zero=True
            )
        if issue:
            issues.append(issue)

        start_date, issue = self._date_or_issue(raw.get("start_date"), "start_date")
        if issue:
            issues.append(issue)

        borrower_kind, issue = self._enum_or_issue(
            raw.get("borrower_kind"), BorrowerKind, "borrower_kind", BorrowerKind.INDIVIDUAL
        )
        if issue:
            issues.append(issue)

        term, issue = self._enum_or_issue(raw.get("term"), LoanTerm, "term", LoanTerm.ONE_MONTH)
        if issue:
            issues.append(issue)

        repayment_day, issue = self._repayment_day_or_issue(raw.get("repayment_due_day"))
        if issue:
            issues.append(issue)

        if issues:
            raise ValidationError.from_issues(issues)

        return LoanTerms(
            borrower_name=str(name),
            borrower_kind=borrower_kind,
            principal=principal,
            total_interest_expected=interest,
            term=term,
            start_date=start_date,
            repayment_due_day=repayment_day,
        )

    def _amount_or_issue(
        self,
        value: Any,
        field: str,
        allow_zero: bool,
    ) -> tuple[Optional[Decimal], Optional[ValidationIssue]]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None, ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{field} is required",
            )
        if isinstance(value, bool):
            return None, ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{field} must be a number",
            )

        try:
            if isinstance(value, Decimal):
                amount = value
            elif isinstance(value, float):
                amount = Decimal(str(value))
            else:
                amount = Decimal(str(value).strip().replace(",", ""))
        except (InvalidOperation, ValueError):
            return None, ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"Could not read {value!r} as an amount",
                suggested_fix="Use digits only, e.g. 1500 or 1500.50",
            )

        if not amount.is_finite():
            return None, ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{field} must be a finite number",
            )

        if amount < 0 or (amount == 0 and not allow_zero):
            bound = "zero or more" if allow_zero else "greater than zero"
            return None, ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{field} must be {bound}, got {amount}",
            )

        return amount, None

    def _date_or_issue(
        self,
        value: Any,
        field: str,
    ) -> tuple[Optional[datetime], Optional[ValidationIssue]]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None, ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{field} is required",
            )

        if isinstance(value, datetime):
            return ensure_utc(value), None
        if isinstance(value, date):
            return datetime.combine(value, time.min, tzinfo=timezone.utc), None

        try:
            text = str(value).strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            return ensure_utc(datetime.fromisoformat(text)), None
        except ValueError:
            return None, ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"Could not read {value!r} as a date",
                suggested_fix="Use the YYYY-MM-DD format",
            )

    def _repayment_day_or_issue(
        self,
        value: Any,
    ) -> tuple[Optional[int], Optional[ValidationIssue]]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None, None

        try:
            day = int(str(value).strip())
        except ValueError:
            return None, ValidationIssue(
                field="repayment_due_day",
                issue_type="invalid_format",
                message=f"Could not read {value!r} as a day of the month",
            )

        if not 1 <= day <= 31:
            return None, ValidationIssue(
                field="repayment_due_day",
                issue_type="invalid_value",
                message=f"Repayment day must be between 1 and 31, got {day}",
            )
        return day, None

    def _enum_or_issue(self, value, enum_cls, field, default):
        if value is None or (isinstance(value, str) and not value.strip()):
            return default, None
        if isinstance(value, enum_cls):
            return value, None
        try:
            return enum_cls(str(value).strip().upper()), None
        except ValueError:
            allowed = ", ".join(member.value for member in enum_cls)
            return None, ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"Unknown {field} {value!r}. Allowed: {allowed}",
            )
