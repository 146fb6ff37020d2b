"""Tests for the transaction ledger and status derivation."""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from loan_ledger.ledger import (
    NotFoundError,
    ValidationError,
    append_transaction,
    apply_terms,
    delete_transaction,
    derive_status,
    edit_transaction,
    sort_transactions,
    total_repaid,
    with_derived_status,
)
from loan_ledger.models.loan import (
    Loan,
    LoanStatus,
    Transaction,
    TransactionKind,
)


def _at(month: int, day: int) -> datetime:
    return datetime(2024, month, day, tzinfo=timezone.utc)


def _repayment(amount: str, when: datetime) -> Transaction:
    return Transaction(date=when, amount=Decimal(amount), kind=TransactionKind.REPAYMENT)


def _is_sorted_desc(transactions) -> bool:
    dates = [t.date for t in transactions]
    return dates == sorted(dates, reverse=True)


class TestSortTransactions:
    """Tests for the date-descending ordering."""

    def test_sorts_most_recent_first(self):
        """Test transactions come back newest first."""
        old, mid, new = _repayment("1", _at(1, 5)), _repayment("2", _at(2, 5)), _repayment("3", _at(3, 5))
        assert sort_transactions([mid, old, new]) == (new, mid, old)

    def test_sort_is_idempotent(self):
        """Test that sorting an already sorted list changes nothing."""
        txs = [_repayment("1", _at(1, 5)), _repayment("2", _at(1, 5)), _repayment("3", _at(2, 1))]
        once = sort_transactions(txs)
        assert sort_transactions(once) == once


class TestAppendTransaction:
    """Tests for appending transactions."""

    def test_append_keeps_order(self, make_loan):
        """Test an older transaction lands behind newer ones."""
        loan = make_loan(repayments=["100", "200"])
        updated = append_transaction(loan, _repayment("50", _at(1, 15)))

        assert len(updated.transactions) == 3
        assert updated.transactions[-1].amount == Decimal("50")
        assert _is_sorted_desc(updated.transactions)

    def test_append_same_date_puts_latest_first(self, make_loan):
        """Test ties on date are broken by insertion, latest addition first."""
        loan = make_loan()
        first = _repayment("10", _at(2, 1))
        second = _repayment("20", _at(2, 1))

        updated = append_transaction(append_transaction(loan, first), second)

        assert [t.id for t in updated.transactions] == [second.id, first.id]

    def test_append_does_not_touch_input(self, make_loan):
        """Test the original loan is left as it was."""
        loan = make_loan(repayments=["100"])
        append_transaction(loan, _repayment("50", _at(3, 1)))
        assert len(loan.transactions) == 1

    def test_append_does_not_recompute_status(self, make_loan):
        """Test status is the caller's job."""
        loan = make_loan()
        updated = append_transaction(loan, _repayment("1100", _at(3, 1)))
        assert updated.status == LoanStatus.ACTIVE
        assert with_derived_status(updated).status == LoanStatus.CLOSED

    def test_append_rejects_non_positive_amount(self, make_loan):
        """Test a zero amount is rejected even if it slipped past the model."""
        loan = make_loan()
        bad = Transaction.model_construct(
            id=uuid4(),
            date=_at(3, 1),
            amount=Decimal("0"),
            kind=TransactionKind.REPAYMENT,
            attachment_ref=None,
            note=None,
            seed=False,
        )
        with pytest.raises(ValidationError):
            append_transaction(loan, bad)

    def test_append_rejects_duplicate_id(self, make_loan):
        """Test transaction ids stay unique within a loan."""
        loan = make_loan(repayments=["100"])
        existing = loan.transactions[0]
        duplicate = _repayment("5", _at(3, 1)).model_copy(update={"id": existing.id})

        with pytest.raises(ValidationError) as exc_info:
            append_transaction(loan, duplicate)
        assert exc_info.value.issues[0].issue_type == "duplicate"


class TestEditTransaction:
    """Tests for editing transactions."""

    def test_edit_replaces_amount_and_date(self, make_loan):
        """Test amount and date change while id and kind stay."""
        loan = make_loan(repayments=["100", "200"])
        target = loan.transactions[-1]

        updated = edit_transaction(loan, target.id, Decimal("150"), _at(4, 1))
        edited = updated.transactions[0]

        assert edited.id == target.id
        assert edited.kind == TransactionKind.REPAYMENT
        assert edited.amount == Decimal("150")
        assert edited.date == _at(4, 1)
        assert _is_sorted_desc(updated.transactions)

    def test_edit_naive_date_is_utc(self, make_loan):
        """Test a naive date is stored as UTC."""
        loan = make_loan(repayments=["100"])
        updated = edit_transaction(loan, loan.transactions[0].id, Decimal("100"), datetime(2024, 5, 1))
        assert updated.transactions[0].date == _at(5, 1)

    def test_edit_unknown_id_raises(self, make_loan):
        """Test editing a missing transaction raises NotFoundError."""
        with pytest.raises(NotFoundError):
            edit_transaction(make_loan(), uuid4(), Decimal("1"), _at(1, 1))

    def test_edit_rejects_non_positive_amount(self, make_loan):
        """Test the new amount must be positive."""
        loan = make_loan(repayments=["100"])
        with pytest.raises(ValidationError):
            edit_transaction(loan, loan.transactions[0].id, Decimal("-5"), _at(1, 1))

    @pytest.mark.parametrize("amount", [200.5, 200])
    def test_edit_converts_plain_numbers(self, make_loan, amount):
        """Test float and int amounts are stored as Decimal like new transactions."""
        loan = make_loan(repayments=["100"])
        updated = edit_transaction(loan, loan.transactions[0].id, amount, _at(2, 1))

        assert updated.transactions[0].amount == Decimal(str(amount))
        assert isinstance(updated.transactions[0].amount, Decimal)
        assert total_repaid(updated.transactions) == Decimal(str(amount))

    @pytest.mark.parametrize("amount", [Decimal("NaN"), Decimal("Infinity"), Decimal("sNaN"), float("nan"), None])
    def test_edit_rejects_non_finite_amount(self, make_loan, amount):
        """Test NaN, infinity and missing amounts raise ValidationError."""
        loan = make_loan(repayments=["100"])
        with pytest.raises(ValidationError):
            edit_transaction(loan, loan.transactions[0].id, amount, _at(1, 1))


class TestDeleteTransaction:
    """Tests for deleting transactions."""

    def test_delete_removes_entry(self, make_loan):
        """Test the entry is gone and the rest stays sorted."""
        loan = make_loan(repayments=["100", "200", "300"])
        target = loan.transactions[1]

        updated = delete_transaction(loan, target.id)

        assert target.id not in [t.id for t in updated.transactions]
        assert len(updated.transactions) == 2
        assert _is_sorted_desc(updated.transactions)

    def test_delete_unknown_id_raises(self, make_loan):
        """Test deleting a missing transaction raises NotFoundError."""
        with pytest.raises(NotFoundError):
            delete_transaction(make_loan(repayments=["100"]), uuid4())


class TestStatusDerivation:
    """Tests for deriving loan status."""

    def test_only_repayments_count(self):
        """Test LEND and FEE entries are ignored in the repaid total."""
        txs = [
            Transaction(amount=Decimal("1000"), kind=TransactionKind.LEND),
            Transaction(amount=Decimal("50"), kind=TransactionKind.FEE),
            Transaction(amount=Decimal("300"), kind=TransactionKind.REPAYMENT),
        ]
        assert total_repaid(txs) == Decimal("300")
        assert derive_status(Decimal("100"), Decimal("0"), txs) == LoanStatus.CLOSED
        assert derive_status(Decimal("1000"), Decimal("0"), txs) == LoanStatus.ACTIVE

    def test_exact_payment_closes(self, make_loan):
        """Test repaying exactly principal plus interest closes the loan."""
        assert make_loan(repayments=["1000", "100"]).status == LoanStatus.CLOSED

    def test_underpayment_stays_active(self, make_loan):
        """Test being one unit short keeps the loan active."""
        assert make_loan(repayments=["1000", "99.99"]).status == LoanStatus.ACTIVE

    def test_overpayment_closes(self, make_loan):
        """Test overpaying is allowed and closes the loan."""
        assert make_loan(repayments=["2000"]).status == LoanStatus.CLOSED

    def test_deleting_only_repayment_reopens(self, make_loan):
        """Test status is never sticky."""
        loan = make_loan(repayments=["1100"])
        assert loan.status == LoanStatus.CLOSED

        reopened = with_derived_status(delete_transaction(loan, loan.transactions[0].id))
        assert reopened.status == LoanStatus.ACTIVE

    def test_derivation_does_not_touch_transactions(self, make_loan):
        """Test recomputing status leaves the history alone."""
        loan = make_loan(repayments=["100", "200"])
        assert with_derived_status(loan).transactions == loan.transactions


class TestApplyTerms:
    """Tests for editing terms and the seed transaction patch."""

    def _seeded_loan(self, make_terms) -> Loan:
        terms = make_terms()
        seed = Transaction(
            date=terms.start_date,
            amount=terms.principal,
            kind=TransactionKind.LEND,
            attachment_ref="slip-001",
            seed=True,
        )
        return Loan(**terms.model_dump(), transactions=[seed])

    def test_patches_seed_transaction(self, make_terms):
        """Test the seed LEND follows the new principal and start date."""
        loan = self._seeded_loan(make_terms)
        new_terms = make_terms(principal="1500", start_date=_at(1, 10))

        updated = apply_terms(loan, new_terms)
        seed = updated.seed_transaction

        assert updated.principal == Decimal("1500")
        assert seed.id == loan.transactions[0].id
        assert seed.amount == Decimal("1500")
        assert seed.date == _at(1, 10)
        assert seed.attachment_ref == "slip-001"

    def test_does_not_create_second_seed(self, make_terms):
        """Test repeated edits keep exactly one seed transaction."""
        loan = self._seeded_loan(make_terms)
        for principal in ("1200", "1300", "1400"):
            loan = apply_terms(loan, make_terms(principal=principal))

        seeds = [t for t in loan.transactions if t.seed]
        assert len(seeds) == 1
        assert len(loan.transactions) == 1

    def test_ordinary_lend_not_patched(self, make_terms):
        """Test only the seed transaction is rewritten."""
        terms = make_terms()
        extra = Transaction(date=_at(1, 20), amount=Decimal("200"), kind=TransactionKind.LEND)
        loan = Loan(**terms.model_dump(), transactions=[extra])

        updated = apply_terms(loan, make_terms(principal="5000"))

        assert updated.transactions[0].amount == Decimal("200")

    def test_recomputes_status(self, make_loan, make_terms):
        """Test lowering the interest can close a loan."""
        loan = make_loan(repayments=["1000", "50"])
        assert loan.status == LoanStatus.ACTIVE

        updated = apply_terms(loan, make_terms(interest="50"))
        assert updated.status == LoanStatus.CLOSED

    def test_keeps_identity_and_flags(self, make_loan, make_terms):
        """Test id and notification flag survive a terms edit."""
        loan = make_loan().model_copy(update={"notifications_enabled": False})
        updated = apply_terms(loan, make_terms(borrower_name="Malee"))

        assert updated.id == loan.id
        assert updated.borrower_name == "Malee"
        assert updated.notifications_enabled is False
