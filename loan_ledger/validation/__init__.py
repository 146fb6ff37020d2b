"""Input validation package."""

from loan_ledger.validation.validator import LoanInputValidator

__all__ = ["LoanInputValidator"]
