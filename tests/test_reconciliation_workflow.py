"""Tests for the cash reconciliation workflow."""

import asyncio
from decimal import Decimal

import pytest

from src.models.audit import AuditEventType
from src.models.reconciliation import (
    ReconciliationCreateData,
    ReconciliationReceipt,
    ReconciliationStatus,
)
from src.reconciliation import DuplicateSubmissionError, ReconciliationWorkflow
from src.services.api import RequestValidationError
from src.services.resources import ReconciliationGateway
from src.validation import FormValidationError, INVALID_CASH_AMOUNT
from tests.factories import page_payload, reconciliation_payload


@pytest.fixture
def gateway(client, audit_logger) -> ReconciliationGateway:
    return ReconciliationGateway(client, audit_logger=audit_logger)


@pytest.fixture
def workflow(gateway, audit_logger) -> ReconciliationWorkflow:
    return ReconciliationWorkflow(gateway, audit_logger=audit_logger, actor=lambda: "msantos")


@pytest.fixture
def expected_5000(backend):
    backend.add("GET", "/reconciliations/create", {"expected_cash": 5000, "transaction_count": 12})


class TestPreview:
    """Tests for the local variance preview."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("typed, variance, status", [
        ("5000", Decimal("0.00"), ReconciliationStatus.BALANCED),
        ("5200", Decimal("200.00"), ReconciliationStatus.OVERAGE),
        ("4,800.00", Decimal("-200.00"), ReconciliationStatus.SHORTAGE),
    ])
    async def test_preview(self, workflow, expected_5000, typed, variance, status):
        """Test the preview against expected cash of 5000."""
        data = await workflow.start()
        assert data.expected_cash == Decimal("5000")
        assert data.transaction_count == 12

        result = workflow.preview(typed)
        assert result.variance == variance
        assert result.status is status

    def test_preview_before_start(self, workflow):
        """Test preview needs the expected cash first."""
        with pytest.raises(RuntimeError):
            workflow.preview("100")

    @pytest.mark.asyncio
    async def test_preview_rejects_bad_input(self, workflow, expected_5000):
        """Test the preview applies the same input rules as submit."""
        await workflow.start()
        with pytest.raises(FormValidationError):
            workflow.preview("-5")


class TestSubmit:
    """Tests for submit."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("typed", ["", "abc", "-100", "1e30"])
    async def test_invalid_input_never_sent(self, workflow, backend, expected_5000, audit_logger, typed):
        """Test bad amounts are rejected locally and audited."""
        await workflow.start()
        with pytest.raises(FormValidationError) as exc_info:
            await workflow.submit(typed)
        assert exc_info.value.message == INVALID_CASH_AMOUNT
        assert backend.calls("POST", "/reconciliations") == []
        assert audit_logger.history[-1].event_type == AuditEventType.RECONCILIATION_REJECTED

    @pytest.mark.asyncio
    async def test_overlong_notes_never_sent(self, workflow, backend, expected_5000):
        """Test the notes limit is checked before the request."""
        await workflow.start()
        with pytest.raises(FormValidationError) as exc_info:
            await workflow.submit("5000", notes="x" * 1001)
        assert "notes" in exc_info.value.errors
        assert backend.calls("POST", "/reconciliations") == []

    @pytest.mark.asyncio
    async def test_submit_sends_one_post(self, workflow, backend, expected_5000, audit_logger):
        """Test the request body and the audit event of a successful count."""
        backend.add("POST", "/reconciliations", (201, {
            "message": "Reconciliation created successfully",
            "reconciliation": reconciliation_payload(id=31, expected=5000, actual=5200),
        }))
        await workflow.start()
        receipt = await workflow.submit("5,200")

        posts = backend.calls("POST", "/reconciliations")
        assert len(posts) == 1
        assert backend.body(posts[0]) == {"actual_cash": 5200.0, "notes": None}
        assert receipt.reconciliation.status is ReconciliationStatus.OVERAGE
        assert receipt.reconciliation.variance == Decimal("200")

        event = audit_logger.history[-1]
        assert event.event_type == AuditEventType.RECONCILIATION_SUBMITTED
        assert event.actor == "msantos"
        assert event.entity_id == "31"
        assert event.details["status"] == "overage"
        assert workflow.create_data is None

    @pytest.mark.asyncio
    async def test_notes_sent_trimmed(self, workflow, backend, expected_5000):
        """Test notes are trimmed and kept."""
        backend.add("POST", "/reconciliations", {"message": "Reconciliation created successfully"})
        await workflow.start()
        await workflow.submit("4800", notes="  Short by a 200 bill  ")
        body = backend.body(backend.calls("POST", "/reconciliations")[0])
        assert body == {"actual_cash": 4800.0, "notes": "Short by a 200 bill"}

    @pytest.mark.asyncio
    async def test_server_rejection_surfaces(self, workflow, backend, expected_5000, audit_logger):
        """Test a 422 is raised with its field errors and is not retried."""
        backend.add("POST", "/reconciliations", (422, {
            "message": "The actual cash field is required.",
            "errors": {"actual_cash": ["The actual cash field is required."]},
        }))
        await workflow.start()
        with pytest.raises(RequestValidationError) as exc_info:
            await workflow.submit("5000")
        assert exc_info.value.first_error("actual_cash") == "The actual cash field is required."
        assert len(backend.calls("POST", "/reconciliations")) == 1
        assert workflow.submitting is False
        assert workflow.create_data is not None
        assert audit_logger.history[-1].event_type == AuditEventType.RECONCILIATION_FAILED

    @pytest.mark.asyncio
    async def test_history_refreshed_after_submit(self, workflow, backend, expected_5000):
        """Test the bound history list reloads page 1 after a count."""
        backend.add(
            "GET", "/reconciliations",
            page_payload([reconciliation_payload(id=30)]),
            page_payload([reconciliation_payload(id=31), reconciliation_payload(id=30)]),
        )
        backend.add("POST", "/reconciliations", {"message": "Reconciliation created successfully"})

        history = workflow.list_view(status="all")
        await history.refresh()
        assert [r.id for r in history.items] == [30]

        await workflow.start()
        await workflow.submit("5000")
        assert [r.id for r in history.items] == [31, 30]
        assert "status" not in backend.calls("GET", "/reconciliations")[-1].url.params


class GatedGateway:
    """Stands in for ReconciliationGateway; create() waits on an event."""

    def __init__(self):
        self.release = asyncio.Event()
        self.created = 0

    async def create_data(self):
        return ReconciliationCreateData(expected_cash=Decimal("5000"), transaction_count=3)

    async def create(self, submission):
        self.created += 1
        await self.release.wait()
        return ReconciliationReceipt()


class TestDuplicateSubmission:
    """Tests for the in-flight guard."""

    @pytest.mark.asyncio
    async def test_second_submit_refused(self):
        """Test a double tap sends one POST."""
        gateway = GatedGateway()
        workflow = ReconciliationWorkflow(gateway)
        await workflow.start()

        first = asyncio.create_task(workflow.submit("5000"))
        await asyncio.sleep(0)
        assert workflow.submitting is True

        with pytest.raises(DuplicateSubmissionError):
            await workflow.submit("5000")

        gateway.release.set()
        await first
        assert gateway.created == 1
        assert workflow.submitting is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
