"""
Cash Reconciliation Workflow

The end-of-shift cash count, as a cashier goes through it:

1. start()   -> load the expected cash and transaction count
2. preview() -> as they type, show the variance and status locally
3. submit()  -> validate, POST once, audit, refresh the list

IMPORTANT:
- Input that is not a non-negative number never reaches the network
- One submit() call makes at most one POST; failures are not retried
- A second submit() while the first is in flight is refused
- The server snapshots expected cash on its side; the local preview is
  advisory and the stored record is whatever the server returns
"""

from typing import Callable, Optional
from uuid import UUID

import structlog
from pydantic import ValidationError as PydanticValidationError

from src.audit import AuditLogger, create_correlation_id
from src.models.reconciliation import (
    ReconciliationCreateData,
    ReconciliationReceipt,
    ReconciliationSubmission,
    VarianceResult,
)
from src.queries import PaginatedList
from src.reconciliation.variance import classify_variance
from src.services.api import ApiError
from src.services.resources import ReconciliationGateway
from src.validation import FormValidationError, parse_cash_amount


logger = structlog.get_logger(__name__)


class DuplicateSubmissionError(RuntimeError):
    """A reconciliation submission is already in flight."""
    pass


class ReconciliationWorkflow:
    """
    Drives one cashier's reconciliation screen.

    Args:
        gateway: Reconciliation endpoints
        audit_logger: Optional audit trail
        actor: Returns the signed-in username for audit events
        per_page: Page size for list_view()
    """

    def __init__(
        self,
        gateway: ReconciliationGateway,
        audit_logger: Optional[AuditLogger] = None,
        actor: Optional[Callable[[], Optional[str]]] = None,
        per_page: int = 20,
    ):
        self._gateway = gateway
        self._audit_logger = audit_logger
        self._actor = actor or (lambda: None)
        self._per_page = per_page

        self._create_data: Optional[ReconciliationCreateData] = None
        self._correlation_id: Optional[UUID] = None
        self._submitting = False
        self._list: Optional[PaginatedList] = None

    @property
    def create_data(self) -> Optional[ReconciliationCreateData]:
        return self._create_data

    @property
    def submitting(self) -> bool:
        return self._submitting

    async def start(self) -> ReconciliationCreateData:
        """Open the count form with the server's current expected cash."""
        self._create_data = await self._gateway.create_data()
        self._correlation_id = create_correlation_id()
        logger.info(
            "reconciliation_started",
            expected_cash=str(self._create_data.expected_cash),
            transaction_count=self._create_data.transaction_count,
            correlation_id=str(self._correlation_id),
        )
        return self._create_data

    def preview(self, actual_text: str) -> VarianceResult:
        """
        Classify the typed amount against the loaded expected cash.

        Raises:
            RuntimeError: start() has not been called
            FormValidationError: The amount is not a valid cash amount
        """
        if self._create_data is None:
            raise RuntimeError("Call start() before previewing a count")
        actual = parse_cash_amount(actual_text)
        return classify_variance(self._create_data.expected_cash, actual)

    async def submit(self, actual_text: str, notes: Optional[str] = None) -> ReconciliationReceipt:
        """
        Validate and submit the counted cash.

        Raises:
            FormValidationError: Invalid amount or notes (nothing sent)
            DuplicateSubmissionError: A submission is already in flight
            ApiError: The server rejected the submission or was unreachable
        """
        correlation_id = self._correlation_id or create_correlation_id()
        actor = self._actor()

        try:
            actual = parse_cash_amount(actual_text)
            submission = ReconciliationSubmission(actual_cash=actual, notes=notes)
        except FormValidationError as e:
            await self._log_rejected(actor, actual_text, e.message, correlation_id)
            raise
        except PydanticValidationError as e:
            message = "Notes must be at most 1000 characters"
            await self._log_rejected(actor, actual_text, message, correlation_id)
            raise FormValidationError(message, {"notes": message}) from e

        if self._submitting:
            raise DuplicateSubmissionError("A reconciliation is already being submitted")

        self._submitting = True
        try:
            receipt = await self._gateway.create(submission)
        except ApiError as e:
            logger.warning(
                "reconciliation_submit_failed",
                status_code=e.status_code,
                error=e.message,
                correlation_id=str(correlation_id),
            )
            if self._audit_logger:
                await self._audit_logger.log_reconciliation_failed(
                    actor=actor,
                    error_message=e.user_message("Failed to create reconciliation"),
                    status_code=e.status_code,
                    correlation_id=correlation_id,
                )
            raise
        finally:
            self._submitting = False

        await self._log_submitted(actor, submission, receipt, correlation_id)

        self._create_data = None
        self._correlation_id = None
        if self._list is not None:
            await self._list.refresh()
        return receipt

    def list_view(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> PaginatedList:
        """
        The reconciliation history list, bound to search and status filters.

        The same list is refreshed after every successful submit.
        """
        filters = {k: v for k, v in {"search": search, "status": status}.items() if v}
        self._list = PaginatedList(
            self._gateway.list,
            per_page=self._per_page,
            filters=filters,
            audit_logger=self._audit_logger,
            resource="reconciliations",
        )
        return self._list

    async def _log_rejected(
        self,
        actor: Optional[str],
        raw_input: str,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        logger.info("reconciliation_input_rejected", reason=reason)
        if self._audit_logger:
            await self._audit_logger.log_reconciliation_rejected(
                actor=actor,
                raw_input=str(raw_input),
                reason=reason,
                correlation_id=correlation_id,
            )

    async def _log_submitted(
        self,
        actor: Optional[str],
        submission: ReconciliationSubmission,
        receipt: ReconciliationReceipt,
        correlation_id: UUID,
    ) -> None:
        record = receipt.reconciliation
        if record is not None:
            expected, variance, status = record.expected_cash, record.variance, record.status
        elif self._create_data is not None:
            local = classify_variance(self._create_data.expected_cash, submission.actual_cash)
            expected, variance, status = local.expected_cash, local.variance, local.status
        else:
            expected = variance = status = None

        logger.info(
            "reconciliation_submitted",
            reconciliation_id=record.id if record else None,
            actual_cash=str(submission.actual_cash),
            status=status.value if status else None,
            correlation_id=str(correlation_id),
        )
        if self._audit_logger:
            await self._audit_logger.log_reconciliation_submitted(
                actor=actor,
                reconciliation_id=record.id if record else None,
                expected_cash=str(expected) if expected is not None else "unknown",
                actual_cash=str(submission.actual_cash),
                variance=str(variance) if variance is not None else "unknown",
                status=status.value if status else "unknown",
                correlation_id=correlation_id,
            )
