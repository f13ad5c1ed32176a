"""
Audit Logger

The audit logger:
- Is async so callers in the request flow can await it uniformly
- Gracefully handles failures (never crashes the app if logging fails)
- Keeps a bounded history so the UI can show what just happened
"""

import logging
import sys
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and therefore structlog) to stdout at `level`."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory history (for on-screen display)
    """

    def __init__(self, history_size: int = 100):
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger(__name__)

    @property
    def history(self) -> list[AuditEvent]:
        """Most recent events, oldest first."""
        return list(self._history)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be recorded; never raises.
        """
        try:
            log_dict = event.to_log_dict()
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
            self._history.append(event)
        except Exception as e:
            # Log failure but don't raise
            logging.getLogger(__name__).error("audit_log_failed: %s", e)
            return False
        return True

    async def log_login_succeeded(self, username: str, role: str) -> None:
        await self.log(AuditEventBuilder.login_succeeded(username=username, role=role))

    async def log_login_failed(
        self,
        username: str,
        error_message: str,
        status_code: Optional[int] = None,
    ) -> None:
        await self.log(AuditEventBuilder.login_failed(
            username=username,
            error_message=error_message,
            status_code=status_code,
        ))

    async def log_session_restored(self, username: str) -> None:
        await self.log(AuditEventBuilder.session_restored(username=username))

    async def log_session_expired(self, error_message: str) -> None:
        await self.log(AuditEventBuilder.session_expired(error_message=error_message))

    async def log_logout(
        self,
        username: Optional[str],
        revoked: bool,
        error_message: Optional[str] = None,
    ) -> None:
        """Log sign-out; a failed server revoke is logged as its own warning first."""
        if error_message:
            await self.log(AuditEventBuilder.logout_revoke_failed(
                username=username,
                error_message=error_message,
            ))
        await self.log(AuditEventBuilder.logout_completed(username=username, revoked=revoked))

    async def log_token_cleared(self, path: str) -> None:
        await self.log(AuditEventBuilder.token_cleared_unauthorized(path=path))

    async def log_password_reset(self, email: str, completed: bool) -> None:
        await self.log(AuditEventBuilder.password_reset(email=email, completed=completed))

    async def log_reconciliation_submitted(
        self,
        actor: Optional[str],
        reconciliation_id: Optional[int],
        expected_cash: str,
        actual_cash: str,
        variance: str,
        status: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.reconciliation_submitted(
            actor=actor,
            reconciliation_id=reconciliation_id,
            expected_cash=expected_cash,
            actual_cash=actual_cash,
            variance=variance,
            status=status,
            correlation_id=correlation_id,
        ))

    async def log_reconciliation_rejected(
        self,
        actor: Optional[str],
        raw_input: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.reconciliation_rejected(
            actor=actor,
            raw_input=raw_input,
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_reconciliation_failed(
        self,
        actor: Optional[str],
        error_message: str,
        status_code: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.reconciliation_failed(
            actor=actor,
            error_message=error_message,
            status_code=status_code,
            correlation_id=correlation_id,
        ))

    async def log_record_saved(
        self,
        entity_type: str,
        entity_id: Optional[int],
        created: bool,
    ) -> None:
        await self.log(AuditEventBuilder.record_saved(
            entity_type=entity_type,
            entity_id=entity_id,
            created=created,
        ))

    async def log_record_toggled(self, entity_type: str, entity_id: int) -> None:
        await self.log(AuditEventBuilder.record_toggled(entity_type=entity_type, entity_id=entity_id))

    async def log_list_fetch_failed(self, resource: str, page: int, error_message: str) -> None:
        await self.log(AuditEventBuilder.list_fetch_failed(
            resource=resource,
            page=page,
            error_message=error_message,
        ))

    async def log_api_error(
        self,
        method: str,
        path: str,
        status_code: Optional[int],
        error_message: str,
    ) -> None:
        await self.log(AuditEventBuilder.api_error(
            method=method,
            path=path,
            status_code=status_code,
            error_message=error_message,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., opening the cash count form)
    and pass it through all subsequent operations.
    """
    return uuid4()
