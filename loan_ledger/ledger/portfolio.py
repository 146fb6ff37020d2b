"""
Portfolio Aggregator

Folds the whole loan collection into a PortfolioSnapshot.
Pure and recomputed on every read; nothing here is cached.

NOTE: Realized interest for a closed loan is its *expected* interest,
not what was actually repaid minus principal. Over- or underpayment
makes the two differ. This is kept on purpose until the intended
meaning of "realized" is settled.
"""

from decimal import Decimal
from typing import Iterable

from loan_ledger.ledger.status import total_due, total_repaid
from loan_ledger.models.loan import (
    Loan,
    LoanBalance,
    LoanStatus,
    PortfolioSnapshot,
    PortfolioSummaryEntry,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def pending_amount(loan: Loan) -> Decimal:
    """What is still owed, floored at zero when the borrower overpaid."""
    return max(ZERO, total_due(loan) - total_repaid(loan.transactions))


def loan_balance(loan: Loan) -> LoanBalance:
    repaid = total_repaid(loan.transactions)
    due = total_due(loan)
    progress = min(repaid / due * HUNDRED, HUNDRED) if due > 0 else HUNDRED
    progress = progress.quantize(Decimal("0.01"))
    return LoanBalance(
        total_repaid=repaid,
        total_due=due,
        pending=max(ZERO, due - repaid),
        progress_percent=progress,
    )


def compute_snapshot(loans: Iterable[Loan]) -> PortfolioSnapshot:
    principal_active = ZERO
    interest_active = ZERO
    interest_realized = ZERO
    pending_active = ZERO
    active_count = 0

    for loan in loans:
        if loan.status != LoanStatus.CLOSED:
            active_count += 1
            principal_active += loan.principal
            interest_active += loan.total_interest_expected
            pending_active += pending_amount(loan)
        else:
            interest_realized += loan.total_interest_expected

    return PortfolioSnapshot(
        total_principal_active=principal_active,
        total_interest_expected_active=interest_active,
        total_interest_realized_closed=interest_realized,
        total_pending_active=pending_active,
        active_loan_count=active_count,
    )


def summarize_for_analysis(loans: Iterable[Loan]) -> list[PortfolioSummaryEntry]:
    """Read-only summary of the active loans for the text-generation service."""
    return [
        PortfolioSummaryEntry(
            borrower_name=loan.borrower_name,
            principal=loan.principal,
            borrower_kind=loan.borrower_kind,
            status=loan.status,
            term=loan.term,
            total_repaid=total_repaid(loan.transactions),
        )
        for loan in loans
        if loan.status == LoanStatus.ACTIVE
    ]
