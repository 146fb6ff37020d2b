"""
Ledger Store for Loan Ledger

This module owns the loan collection and exposes the operations the UI
calls: create, edit and delete loans, record, edit and delete
transactions, toggle notifications, and read portfolio figures.

DESIGN DECISION: The store enforces the boundaries:
- Ledger math lives in loan_ledger.ledger (pure functions)
- Persistence is an injected collaborator, called after each mutation
- Every successful mutation is audited

Each mutation builds the new collection first, saves it, and only then
replaces the in-memory copy. If anything fails along the way the store
still holds its last valid state.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Sequence
from uuid import UUID

from loan_ledger.agents import PortfolioAnalysisAgent
from loan_ledger.audit import AuditLogger, configure_logging
from loan_ledger.config import get_settings
from loan_ledger.ledger import (
    NotFoundError,
    append_transaction,
    apply_terms,
    compute_snapshot,
    delete_transaction,
    edit_transaction,
    loan_balance,
    require_positive_amount,
    with_derived_status,
)
from loan_ledger.models.audit import AuditEvent, AuditEventBuilder
from loan_ledger.models.loan import (
    Loan,
    LoanBalance,
    LoanTerms,
    PortfolioSnapshot,
    Transaction,
    TransactionKind,
    ensure_utc,
    utc_now,
)
from loan_ledger.services.storage import (
    JsonFileLedgerStorage,
    LedgerStorageInterface,
    StorageError,
)


class LedgerStore:
    """
    Owns the ordered loan collection (newest created first).

    Single writer, synchronous. Loans are immutable values, so the
    tuple returned by `loans` can be handed out freely.
    """

    def __init__(
        self,
        storage: Optional[LedgerStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize the store with an empty collection.

        Args:
            storage: Persistence collaborator. If None, nothing is saved.
            audit_logger: Audit trail. If None, a local logger is used.
        """
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._loans: tuple[Loan, ...] = ()

    @property
    def loans(self) -> tuple[Loan, ...]:
        return self._loans

    def load(self) -> list[Loan]:
        """
        Replace the collection with what storage holds.

        A corrupt or unreadable snapshot is logged and the store
        falls back to an empty ledger.
        """
        if self._storage is None:
            return list(self._loans)

        try:
            loans = self._storage.load()
        except StorageError as e:
            self._audit_logger.log(AuditEventBuilder.ledger_load_failed(
                error_type=type(e).__name__,
                error_message=str(e),
            ))
            loans = []
        else:
            self._audit_logger.log(AuditEventBuilder.ledger_loaded(len(loans)))

        self._loans = tuple(loans)
        return list(self._loans)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_loan(self, loan_id: UUID) -> Loan:
        for loan in self._loans:
            if loan.id == loan_id:
                return loan
        raise NotFoundError(f"Loan {loan_id} not found")

    def find_loans(self, query: str) -> list[Loan]:
        """Case-insensitive substring search on borrower names."""
        needle = query.strip().lower()
        return [loan for loan in self._loans if needle in loan.borrower_name.lower()]

    def snapshot(self) -> PortfolioSnapshot:
        return compute_snapshot(self._loans)

    def balance(self, loan_id: UUID) -> LoanBalance:
        return loan_balance(self.get_loan(loan_id))

    # -------------------------------------------------------------------------
    # Loan operations
    # -------------------------------------------------------------------------

    def create_loan(
        self,
        terms: LoanTerms,
        initial_transfer_attachment: Optional[str] = None,
    ) -> Loan:
        """
        Create a new ACTIVE loan.

        When a proof of the initial transfer is attached, a seed LEND
        transaction for the principal is recorded on the start date.
        """
        transactions = []
        if initial_transfer_attachment:
            transactions.append(Transaction(
                date=terms.start_date,
                amount=terms.principal,
                kind=TransactionKind.LEND,
                attachment_ref=initial_transfer_attachment,
                seed=True,
            ))

        loan = Loan(**terms.model_dump(), transactions=transactions)

        self._commit(
            (loan, *self._loans),
            AuditEventBuilder.loan_created(
                loan_id=loan.id,
                borrower=loan.borrower_name,
                principal=str(loan.principal),
                seeded=bool(transactions),
            ),
            operation="create_loan",
        )
        return loan

    def update_loan_terms(self, loan_id: UUID, terms: LoanTerms) -> Loan:
        """Edit a loan's terms. Patches the seed transaction and recomputes status."""
        updated = apply_terms(self.get_loan(loan_id), terms)
        self._replace(
            updated,
            AuditEventBuilder.loan_updated(
                loan_id=updated.id,
                principal=str(updated.principal),
                total_interest_expected=str(updated.total_interest_expected),
                status=updated.status.value,
            ),
            operation="update_loan_terms",
        )
        return updated

    def delete_loan(self, loan_id: UUID) -> None:
        loan = self.get_loan(loan_id)
        self._commit(
            tuple(l for l in self._loans if l.id != loan_id),
            AuditEventBuilder.loan_deleted(loan.id, loan.borrower_name),
            operation="delete_loan",
        )

    def toggle_notifications(self, loan_id: UUID) -> Loan:
        loan = self.get_loan(loan_id)
        updated = loan.model_copy(update={"notifications_enabled": not loan.notifications_enabled})
        self._replace(
            updated,
            AuditEventBuilder.notifications_toggled(updated.id, updated.notifications_enabled),
            operation="toggle_notifications",
        )
        return updated

    # -------------------------------------------------------------------------
    # Transaction operations
    # -------------------------------------------------------------------------

    def record_repayment(
        self,
        loan_id: UUID,
        amount: Decimal,
        date: Optional[datetime] = None,
        attachment_ref: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Loan:
        """Record money received from the borrower. Date defaults to now."""
        return self.record_transaction(
            loan_id,
            TransactionKind.REPAYMENT,
            amount,
            date=date,
            attachment_ref=attachment_ref,
            note=note,
        )

    def record_transaction(
        self,
        loan_id: UUID,
        kind: TransactionKind,
        amount: Decimal,
        date: Optional[datetime] = None,
        attachment_ref: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Loan:
        """
        Record any kind of transaction against a loan.

        Only REPAYMENT entries count toward closing the loan.

        Raises:
            NotFoundError: If the loan does not exist
            ValidationError: If the amount is not positive
        """
        loan = self.get_loan(loan_id)
        require_positive_amount(amount)
        transaction = Transaction(
            date=ensure_utc(date) if date is not None else utc_now(),
            amount=amount,
            kind=kind,
            attachment_ref=attachment_ref,
            note=note,
        )

        updated = with_derived_status(append_transaction(loan, transaction))
        self._replace(
            updated,
            AuditEventBuilder.transaction_recorded(
                loan_id=updated.id,
                transaction_id=transaction.id,
                kind=kind.value,
                amount=str(amount),
                status=updated.status.value,
            ),
            operation="record_transaction",
        )
        return updated

    def edit_transaction(
        self,
        loan_id: UUID,
        transaction_id: UUID,
        amount: Decimal,
        date: datetime,
    ) -> Loan:
        updated = with_derived_status(
            edit_transaction(self.get_loan(loan_id), transaction_id, amount, date)
        )
        self._replace(
            updated,
            AuditEventBuilder.transaction_edited(
                loan_id=updated.id,
                transaction_id=transaction_id,
                amount=str(amount),
                status=updated.status.value,
            ),
            operation="edit_transaction",
        )
        return updated

    def delete_transaction(
        self,
        loan_id: UUID,
        transaction_id: UUID,
        missing_ok: bool = False,
    ) -> Loan:
        """
        Delete a transaction and recompute the loan's status.

        Args:
            missing_ok: Return the loan unchanged instead of raising
                        NotFoundError when the transaction does not exist.
                        An unknown loan id always raises.
        """
        loan = self.get_loan(loan_id)
        try:
            updated = with_derived_status(delete_transaction(loan, transaction_id))
        except NotFoundError:
            if missing_ok:
                return loan
            raise

        self._replace(
            updated,
            AuditEventBuilder.transaction_deleted(
                loan_id=updated.id,
                transaction_id=transaction_id,
                status=updated.status.value,
            ),
            operation="delete_transaction",
        )
        return updated

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _replace(self, updated: Loan, event: AuditEvent, operation: str) -> None:
        self._commit(
            tuple(updated if l.id == updated.id else l for l in self._loans),
            event,
            operation=operation,
        )

    def _commit(self, loans: Sequence[Loan], event: AuditEvent, operation: str) -> None:
        """Save the new collection, then make it current. Raises StorageError on save failure."""
        loans = tuple(loans)
        if self._storage is not None:
            try:
                self._storage.save(loans)
            except StorageError as e:
                self._audit_logger.log(AuditEventBuilder.save_failed(str(e), operation))
                raise
        self._loans = loans
        self._audit_logger.log(event)


def create_app_components(
    use_storage: bool = True,
    storage_factory: Optional[Callable[[], LedgerStorageInterface]] = None,
) -> tuple[LedgerStore, PortfolioAnalysisAgent]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to persist the ledger.
                    Set to False for a throwaway in-memory session.
        storage_factory: Builds the storage backend.
                    Defaults to the JSON file configured in settings.

    Returns:
        (ledger_store, analysis_agent), with the store already loaded
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)
    audit_logger = AuditLogger()

    storage = None
    if use_storage:
        storage = (storage_factory or JsonFileLedgerStorage)()

    store = LedgerStore(storage=storage, audit_logger=audit_logger)
    store.load()

    agent = PortfolioAnalysisAgent(settings=settings.gemini, audit_logger=audit_logger)
    return store, agent
