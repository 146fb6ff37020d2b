"""Exceptions raised by the ledger engine."""

from typing import Optional

from loan_ledger.models.loan import ValidationIssue


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ValidationError(LedgerError, ValueError):
    """
    Input was rejected before any mutation happened.

    Carries every issue found, so the caller can show them all at once.
    """

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None):
        self.issues = issues or []
        super().__init__(message)

    @classmethod
    def from_issues(cls, issues: list[ValidationIssue]) -> "ValidationError":
        summary = "; ".join(f"{issue.field}: {issue.message}" for issue in issues)
        return cls(f"Invalid input: {summary}", issues)


class NotFoundError(LedgerError, LookupError):
    """Unknown loan or transaction id."""
    pass
