"""
Status Derivation

A loan is CLOSED once the sum of its REPAYMENT transactions covers
principal plus expected interest, and ACTIVE otherwise. Exact equality
counts as fully repaid. Overpayment is allowed.

Status is never sticky: it is recomputed from current data after every
change to principal, interest or transactions, so deleting a repayment
can reopen a closed loan.
"""

from decimal import Decimal
from typing import Iterable

from loan_ledger.ledger.transactions import sort_transactions
from loan_ledger.models.loan import (
    Loan,
    LoanStatus,
    LoanTerms,
    Transaction,
    TransactionKind,
)


def total_repaid(transactions: Iterable[Transaction]) -> Decimal:
    return sum(
        (t.amount for t in transactions if t.kind == TransactionKind.REPAYMENT),
        Decimal("0"),
    )


def total_due(loan: LoanTerms) -> Decimal:
    return loan.principal + loan.total_interest_expected


def derive_status(
    principal: Decimal,
    total_interest_expected: Decimal,
    transactions: Iterable[Transaction],
) -> LoanStatus:
    if total_repaid(transactions) >= principal + total_interest_expected:
        return LoanStatus.CLOSED
    return LoanStatus.ACTIVE


def with_derived_status(loan: Loan) -> Loan:
    """Return the loan with its status recomputed. Transactions are untouched."""
    status = derive_status(loan.principal, loan.total_interest_expected, loan.transactions)
    return loan.model_copy(update={"status": status})


def apply_terms(loan: Loan, terms: LoanTerms) -> Loan:
    """
    Replace a loan's terms and keep its seed transaction consistent.

    The seed LEND transaction (created with the loan) gets the new
    principal as amount and the new start date as date, so the ledger's
    "money out" record follows the edited terms without a second LEND
    entry. Status is recomputed afterwards.
    """
    transactions = sort_transactions(
        t.model_copy(update={"amount": terms.principal, "date": terms.start_date})
        if t.seed and t.kind == TransactionKind.LEND
        else t
        for t in loan.transactions
    )
    updated = Loan(
        **{
            **loan.model_dump(exclude={"transactions"}),
            **terms.model_dump(),
        },
        transactions=transactions,
    )
    return with_derived_status(updated)
