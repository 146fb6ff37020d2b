"""
Transaction Ledger

Maintains the ordered transaction history of one loan.

All functions here are pure: they take a Loan and return a new Loan.
None of them recompute status. Callers must run the result through
loan_ledger.ledger.status.with_derived_status afterwards.

Ordering: transactions are always sorted by date, most recent first.
The sort is stable, and new entries are placed ahead of the existing
ones before sorting, so among equal dates the latest addition comes first.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable
from uuid import UUID

from loan_ledger.ledger.errors import NotFoundError, ValidationError
from loan_ledger.models.loan import Loan, Transaction, ValidationIssue


def sort_transactions(transactions: Iterable[Transaction]) -> tuple[Transaction, ...]:
    """Sort by date descending. Stable, so re-sorting changes nothing."""
    return tuple(sorted(transactions, key=lambda t: t.date, reverse=True))


def require_positive_amount(amount: Decimal, field: str = "amount") -> None:
    """Reject missing, non-finite and non-positive amounts with ValidationError."""
    try:
        value = Decimal(str(amount))
        valid = amount is not None and value.is_finite() and value > 0
    except (InvalidOperation, ValueError):
        valid = False

    if not valid:
        raise ValidationError.from_issues([
            ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"Amount must be greater than zero, got {amount}",
            )
        ])


def find_transaction(loan: Loan, transaction_id: UUID) -> Transaction:
    for transaction in loan.transactions:
        if transaction.id == transaction_id:
            return transaction
    raise NotFoundError(f"Transaction {transaction_id} not found in loan {loan.id}")


def append_transaction(loan: Loan, transaction: Transaction) -> Loan:
    """
    Add a transaction to the loan's history.

    Raises:
        ValidationError: If the amount is not positive or the id is already used
    """
    require_positive_amount(transaction.amount)
    if any(t.id == transaction.id for t in loan.transactions):
        raise ValidationError.from_issues([
            ValidationIssue(
                field="id",
                issue_type="duplicate",
                message=f"Transaction {transaction.id} already exists in this loan",
            )
        ])

    transactions = sort_transactions([transaction, *loan.transactions])
    return loan.model_copy(update={"transactions": transactions})


def edit_transaction(
    loan: Loan,
    transaction_id: UUID,
    amount: Decimal,
    date: datetime,
) -> Loan:
    """
    Replace amount and date of an existing transaction.

    Id, kind, attachment, note and seed marker are preserved.

    Raises:
        NotFoundError: If no transaction has that id
        ValidationError: If the new amount is not positive
    """
    original = find_transaction(loan, transaction_id)
    require_positive_amount(amount)

    edited = Transaction.model_validate({**original.model_dump(), "amount": amount, "date": date})
    transactions = sort_transactions(
        edited if t.id == transaction_id else t
        for t in loan.transactions
    )
    return loan.model_copy(update={"transactions": transactions})


def delete_transaction(loan: Loan, transaction_id: UUID) -> Loan:
    """
    Remove a transaction from the loan's history.

    Raises:
        NotFoundError: If no transaction has that id
    """
    find_transaction(loan, transaction_id)
    transactions = sort_transactions(
        t for t in loan.transactions if t.id != transaction_id
    )
    return loan.model_copy(update={"transactions": transactions})
