"""
Data Models Package

This package contains all Pydantic models used in the Loan Ledger system.
All data flowing through the system must conform to these schemas.
"""

from loan_ledger.models.loan import (
    BorrowerKind,
    Loan,
    LoanBalance,
    LoanStatus,
    LoanTerm,
    LoanTerms,
    PortfolioSnapshot,
    PortfolioSummaryEntry,
    Transaction,
    TransactionKind,
    ValidationIssue,
    ensure_utc,
    utc_now,
)
from loan_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Loan models
    "BorrowerKind",
    "Loan",
    "LoanBalance",
    "LoanStatus",
    "LoanTerm",
    "LoanTerms",
    "PortfolioSnapshot",
    "PortfolioSummaryEntry",
    "Transaction",
    "TransactionKind",
    "ValidationIssue",
    "ensure_utc",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
