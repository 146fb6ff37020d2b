"""
Core Data Models for Loan Ledger

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Loans and transactions are frozen Pydantic models.
Every ledger operation returns a new value instead of editing one in place,
so a failed operation can never leave a half-updated loan behind.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC so that all dates stay comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """Direction and purpose of a money movement."""
    LEND = "LEND"            # Money out to the borrower
    REPAYMENT = "REPAYMENT"  # Money back from the borrower
    FEE = "FEE"


class BorrowerKind(str, Enum):
    INDIVIDUAL = "INDIVIDUAL"
    GROUP = "GROUP"


class LoanTerm(str, Enum):
    """Tenor descriptor. Informational only, never used in ledger math."""
    ONE_MONTH = "1_MONTH"
    THREE_MONTHS = "3_MONTHS"
    FIVE_MONTHS = "5_MONTHS"
    TEN_MONTHS = "10_MONTHS"
    CUSTOM = "CUSTOM"


class LoanStatus(str, Enum):
    """
    Derived lifecycle state of a loan.

    CRITICAL: Status is never set by hand. It is recomputed from the
    transaction history after every relevant mutation.
    """
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


# =============================================================================
# LEDGER MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    A dated money movement against a loan.

    A transaction belongs to exactly one loan and has no
    lifecycle of its own.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID, immutable"
    )
    date: datetime = Field(
        default_factory=utc_now,
        description="When the money moved (user-editable)"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount moved"
    )
    kind: TransactionKind
    attachment_ref: Optional[str] = Field(
        default=None,
        description="Opaque reference to a proof-of-transfer image"
    )
    note: Optional[str] = Field(
        default=None,
        max_length=1000,
    )
    seed: bool = Field(
        default=False,
        description="Marks the initial LEND transaction created with the loan"
    )

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class LoanTerms(BaseModel):
    """
    The user-editable part of a loan.

    Used both to create a loan and to edit an existing one.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    borrower_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Borrower's display name"
    )
    borrower_kind: BorrowerKind = BorrowerKind.INDIVIDUAL
    principal: Decimal = Field(
        ...,
        gt=0,
        description="Amount originally lent"
    )
    total_interest_expected: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Fixed interest total expected on top of principal (not a rate)"
    )
    term: LoanTerm = LoanTerm.ONE_MONTH
    start_date: datetime = Field(
        default_factory=utc_now,
        description="When the loan began"
    )
    repayment_due_day: Optional[int] = Field(
        default=None,
        ge=1,
        le=31,
        description="Day of month repayments are due (informational)"
    )

    @field_validator('start_date')
    @classmethod
    def normalize_start_date(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class Loan(LoanTerms):
    """
    A single lending agreement with one borrower.

    The loan owns its transactions exclusively. They are kept
    sorted by date, most recent first, in a tuple so the loan
    cannot be changed behind the ledger's back.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique loan ID"
    )
    status: LoanStatus = Field(
        default=LoanStatus.ACTIVE,
        description="Derived status, see loan_ledger.ledger.status"
    )
    notifications_enabled: bool = True
    transactions: tuple[Transaction, ...] = Field(default_factory=tuple)

    @model_validator(mode='after')
    def validate_unique_transaction_ids(self) -> 'Loan':
        seen = set()
        for transaction in self.transactions:
            if transaction.id in seen:
                raise ValueError(f"Duplicate transaction id {transaction.id}")
            seen.add(transaction.id)
        return self

    @property
    def terms(self) -> LoanTerms:
        """The editable terms of this loan."""
        return LoanTerms(**self.model_dump(include=set(LoanTerms.model_fields)))

    @property
    def seed_transaction(self) -> Optional[Transaction]:
        """The initial LEND transaction, if the loan was created with one."""
        for transaction in self.transactions:
            if transaction.seed and transaction.kind == TransactionKind.LEND:
                return transaction
        return None


# =============================================================================
# DERIVED MODELS - computed on demand, never persisted
# =============================================================================

class PortfolioSnapshot(BaseModel):
    """
    Aggregate statistics over the whole loan collection.

    Recomputed on every read. Never cached or stored.
    """

    total_principal_active: Decimal = Field(default=Decimal("0"), ge=0)
    total_interest_expected_active: Decimal = Field(default=Decimal("0"), ge=0)
    total_interest_realized_closed: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Expected interest of closed loans (not repaid minus principal)"
    )
    total_pending_active: Decimal = Field(default=Decimal("0"), ge=0)
    active_loan_count: int = Field(default=0, ge=0)


class LoanBalance(BaseModel):
    """Repayment progress of a single loan."""

    total_repaid: Decimal
    total_due: Decimal
    pending: Decimal = Field(ge=0)
    progress_percent: Decimal = Field(ge=0, le=100)


class PortfolioSummaryEntry(BaseModel):
    """
    One row of the read-only portfolio summary handed to the
    text-generation service.
    """

    borrower_name: str
    principal: Decimal
    borrower_kind: BorrowerKind
    status: LoanStatus
    term: LoanTerm
    total_repaid: Decimal


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found while validating user input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )
