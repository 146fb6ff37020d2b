"""
Audit Models for Loan Ledger

Every significant action in the system is logged for audit purposes.
This provides:
1. Complete traceability of all ledger changes
2. Debugging information when things go wrong
3. Ability to reconstruct history

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every ledger mutation has its own event type.
    """
    # Loan lifecycle
    LOAN_CREATED = "loan_created"
    LOAN_UPDATED = "loan_updated"
    LOAN_DELETED = "loan_deleted"
    NOTIFICATIONS_TOGGLED = "notifications_toggled"

    # Transaction ledger
    TRANSACTION_RECORDED = "transaction_recorded"
    TRANSACTION_EDITED = "transaction_edited"
    TRANSACTION_DELETED = "transaction_deleted"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_LOAD_FAILED = "ledger_load_failed"
    SAVE_FAILED = "save_failed"

    # Portfolio analysis
    PORTFOLIO_ANALYZED = "portfolio_analyzed"

    # System events
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'loan', 'transaction', 'ledger')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.loan_created(loan_id=..., borrower="...", principal="1000")
        audit_logger.log(event)
    """

    @staticmethod
    def loan_created(
        loan_id: UUID,
        borrower: str,
        principal: str,
        seeded: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAN_CREATED,
            entity_type="loan",
            entity_id=loan_id,
            description=f"Loan created for {borrower}",
            details={"principal": principal, "seeded": seeded},
            is_user_action=True,
        )

    @staticmethod
    def loan_updated(
        loan_id: UUID,
        principal: str,
        total_interest_expected: str,
        status: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAN_UPDATED,
            entity_type="loan",
            entity_id=loan_id,
            description="Loan terms updated",
            details={
                "principal": principal,
                "total_interest_expected": total_interest_expected,
                "status": status,
            },
            is_user_action=True,
        )

    @staticmethod
    def loan_deleted(loan_id: UUID, borrower: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAN_DELETED,
            entity_type="loan",
            entity_id=loan_id,
            description=f"Loan for {borrower} deleted",
            is_user_action=True,
        )

    @staticmethod
    def notifications_toggled(loan_id: UUID, enabled: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATIONS_TOGGLED,
            entity_type="loan",
            entity_id=loan_id,
            description=f"Notifications {'enabled' if enabled else 'disabled'}",
            details={"enabled": enabled},
            is_user_action=True,
        )

    @staticmethod
    def transaction_recorded(
        loan_id: UUID,
        transaction_id: UUID,
        kind: str,
        amount: str,
        status: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"{kind} of {amount} recorded",
            details={"loan_id": str(loan_id), "kind": kind, "amount": amount, "status": status},
            is_user_action=True,
        )

    @staticmethod
    def transaction_edited(
        loan_id: UUID,
        transaction_id: UUID,
        amount: str,
        status: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_EDITED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction edited, new amount {amount}",
            details={"loan_id": str(loan_id), "amount": amount, "status": status},
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        loan_id: UUID,
        transaction_id: UUID,
        status: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction deleted",
            details={"loan_id": str(loan_id), "status": status},
            is_user_action=True,
        )

    @staticmethod
    def ledger_loaded(loan_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            entity_type="ledger",
            description=f"Loaded {loan_count} loans from storage",
            details={"loan_count": loan_count},
        )

    @staticmethod
    def ledger_load_failed(error_type: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            description="Stored ledger could not be read, starting empty",
            error_code=error_type,
            error_message=error_message,
        )

    @staticmethod
    def save_failed(error_message: str, operation: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            description=f"Saving the ledger failed during {operation}",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def portfolio_analyzed(
        loan_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PORTFOLIO_ANALYZED,
            entity_type="portfolio",
            correlation_id=correlation_id,
            description=f"Portfolio analysis generated for {loan_count} active loans",
            details={"loan_count": loan_count},
            is_user_action=True,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"External service {service} failed",
            details={"service": service},
            error_message=error_message,
        )
