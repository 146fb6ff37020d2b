"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from loan_ledger.audit import AuditLogger
from loan_ledger.ledger import with_derived_status
from loan_ledger.models.loan import (
    BorrowerKind,
    Loan,
    LoanTerm,
    LoanTerms,
    Transaction,
    TransactionKind,
)
from loan_ledger.services.storage import InMemoryLedgerStorage
from loan_ledger.store import LedgerStore


@pytest.fixture
def start_date() -> datetime:
    """Fixed loan start date."""
    return datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_terms(start_date):
    """Build LoanTerms with sensible defaults."""

    def _make(principal="1000", interest="100", **overrides) -> LoanTerms:
        values = {
            "borrower_name": "Somchai",
            "borrower_kind": BorrowerKind.INDIVIDUAL,
            "principal": Decimal(principal),
            "total_interest_expected": Decimal(interest),
            "term": LoanTerm.THREE_MONTHS,
            "start_date": start_date,
        }
        values.update(overrides)
        return LoanTerms(**values)

    return _make


@pytest.fixture
def make_loan(make_terms):
    """Build a Loan with the given repayments and a derived status."""

    def _make(principal="1000", interest="100", repayments=(), **overrides) -> Loan:
        transactions = [
            Transaction(
                date=datetime(2024, 2, day + 1, tzinfo=timezone.utc),
                amount=Decimal(amount),
                kind=TransactionKind.REPAYMENT,
            )
            for day, amount in enumerate(repayments)
        ]
        loan = Loan(
            **make_terms(principal, interest, **overrides).model_dump(),
            transactions=sorted(transactions, key=lambda t: t.date, reverse=True),
        )
        return with_derived_status(loan)

    return _make


@pytest.fixture
def storage() -> InMemoryLedgerStorage:
    return InMemoryLedgerStorage()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def store(storage, audit_logger) -> LedgerStore:
    return LedgerStore(storage=storage, audit_logger=audit_logger)
