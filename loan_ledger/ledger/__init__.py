"""
Loan Ledger Engine

Transaction ledger, status derivation and portfolio aggregation.
Everything in this package is pure and synchronous.
"""

from loan_ledger.ledger.errors import LedgerError, NotFoundError, ValidationError
from loan_ledger.ledger.portfolio import (
    compute_snapshot,
    loan_balance,
    pending_amount,
    summarize_for_analysis,
)
from loan_ledger.ledger.status import (
    apply_terms,
    derive_status,
    total_due,
    total_repaid,
    with_derived_status,
)
from loan_ledger.ledger.transactions import (
    append_transaction,
    delete_transaction,
    edit_transaction,
    find_transaction,
    require_positive_amount,
    sort_transactions,
)

__all__ = [
    # Errors
    "LedgerError",
    "NotFoundError",
    "ValidationError",
    # Transaction ledger
    "append_transaction",
    "delete_transaction",
    "edit_transaction",
    "find_transaction",
    "require_positive_amount",
    "sort_transactions",
    # Status derivation
    "apply_terms",
    "derive_status",
    "total_due",
    "total_repaid",
    "with_derived_status",
    # Portfolio
    "compute_snapshot",
    "loan_balance",
    "pending_amount",
    "summarize_for_analysis",
]
