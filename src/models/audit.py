"""
Audit Models for the back-office client

Every significant user action and every failure the user sees is
recorded as an audit event. This provides:
1. Traceability of who signed in, counted cash and changed records
2. Debugging information when the API misbehaves
3. A short on-screen history for the current session

DESIGN DECISION: Audit events are append-only. We never modify them.
The server keeps the authoritative audit log; this is the client's view.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Session
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    SESSION_RESTORED = "session_restored"
    SESSION_EXPIRED = "session_expired"
    LOGOUT_COMPLETED = "logout_completed"
    LOGOUT_REVOKE_FAILED = "logout_revoke_failed"
    TOKEN_CLEARED_UNAUTHORIZED = "token_cleared_unauthorized"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET_COMPLETED = "password_reset_completed"

    # Cash reconciliation
    RECONCILIATION_SUBMITTED = "reconciliation_submitted"
    RECONCILIATION_REJECTED = "reconciliation_rejected"
    RECONCILIATION_FAILED = "reconciliation_failed"

    # Records
    RECORD_SAVED = "record_saved"
    RECORD_TOGGLED = "record_toggled"

    # System events
    LIST_FETCH_FAILED = "list_fetch_failed"
    API_ERROR = "api_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'reconciliation', 'user', 'service')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Server-side ID of the entity this event relates to"
    )
    actor: Optional[str] = Field(
        default=None,
        description="Username of the signed-in user, if any"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = False

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
            "entity_id": self.entity_id,
            "actor": self.actor,
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
        event = AuditEventBuilder.login_succeeded(username="jdoe", role="cashier")
    """

    @staticmethod
    def login_succeeded(username: str, role: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            actor=username,
            description=f"{username} signed in",
            details={"role": role},
            is_user_action=True,
        )

    @staticmethod
    def login_failed(username: str, error_message: str, status_code: Optional[int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            actor=username,
            description=f"Sign-in failed for {username}",
            error_code=str(status_code) if status_code else None,
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def session_restored(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_RESTORED,
            entity_type="user",
            actor=username,
            description=f"Restored saved session for {username}",
        )

    @staticmethod
    def session_expired(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_EXPIRED,
            severity=AuditSeverity.WARNING,
            description="Saved session could not be validated; token cleared",
            error_message=error_message,
        )

    @staticmethod
    def logout_completed(username: Optional[str], revoked: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGOUT_COMPLETED,
            actor=username,
            description="Signed out" if revoked else "Signed out locally (server revoke failed)",
            details={"revoked": revoked},
            is_user_action=True,
        )

    @staticmethod
    def logout_revoke_failed(username: Optional[str], error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGOUT_REVOKE_FAILED,
            severity=AuditSeverity.WARNING,
            actor=username,
            description="Server-side token revoke failed",
            error_message=error_message,
        )

    @staticmethod
    def token_cleared_unauthorized(path: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TOKEN_CLEARED_UNAUTHORIZED,
            severity=AuditSeverity.WARNING,
            description="401 received; authentication token cleared",
            details={"path": path},
        )

    @staticmethod
    def password_reset(email: str, completed: bool) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.PASSWORD_RESET_COMPLETED if completed
                else AuditEventType.PASSWORD_RESET_REQUESTED
            ),
            entity_type="user",
            description=(
                "Password reset completed" if completed else "Password reset OTP requested"
            ),
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def reconciliation_submitted(
        actor: Optional[str],
        reconciliation_id: Optional[int],
        expected_cash: str,
        actual_cash: str,
        variance: str,
        status: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECONCILIATION_SUBMITTED,
            entity_type="reconciliation",
            entity_id=str(reconciliation_id) if reconciliation_id is not None else None,
            actor=actor,
            correlation_id=correlation_id,
            description=f"Cash count submitted ({status})",
            details={
                "expected_cash": expected_cash,
                "actual_cash": actual_cash,
                "variance": variance,
                "status": status,
            },
            is_user_action=True,
        )

    @staticmethod
    def reconciliation_rejected(
        actor: Optional[str],
        raw_input: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECONCILIATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="reconciliation",
            actor=actor,
            correlation_id=correlation_id,
            description="Cash count rejected before submission",
            details={"input": raw_input},
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def reconciliation_failed(
        actor: Optional[str],
        error_message: str,
        status_code: Optional[int],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECONCILIATION_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="reconciliation",
            actor=actor,
            correlation_id=correlation_id,
            description="Cash count submission failed",
            error_code=str(status_code) if status_code else None,
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def record_saved(entity_type: str, entity_id: Optional[int], created: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_SAVED,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            description=f"{entity_type} {'created' if created else 'updated'}",
            details={"created": created},
            is_user_action=True,
        )

    @staticmethod
    def record_toggled(entity_type: str, entity_id: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_TOGGLED,
            entity_type=entity_type,
            entity_id=str(entity_id),
            description=f"{entity_type} {entity_id} active flag toggled",
            is_user_action=True,
        )

    @staticmethod
    def list_fetch_failed(resource: str, page: int, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LIST_FETCH_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=resource,
            description=f"Failed to load {resource} page {page}",
            details={"page": page},
            error_message=error_message,
        )

    @staticmethod
    def api_error(
        method: str,
        path: str,
        status_code: Optional[int],
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.API_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"{method} {path} failed",
            details={"method": method, "path": path},
            error_code=str(status_code) if status_code else None,
            error_message=error_message,
        )
