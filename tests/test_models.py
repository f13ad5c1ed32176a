"""
Tests for the BP Diagnostic back-office client

Test strategy:
1. Unit tests for individual components (models, validators, variance)
2. Integration tests for flows (with httpx.MockTransport standing in for the API)
3. No real API calls in tests
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from src.models.address import Barangay, Region
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from src.models.auth import (
    LoginRequest,
    ResetPasswordRequest,
    StaffAccountForm,
    StaffAccountUpdate,
    User,
    UserRole,
    VerifyOtpRequest,
)
from src.models.common import Page
from src.models.operations import Dashboard, InventoryOverview, StockStatus
from src.models.patients import PatientProfile, PatientUpdate
from src.models.reconciliation import (
    Reconciliation,
    ReconciliationPage,
    ReconciliationStats,
    ReconciliationStatus,
    ReconciliationSubmission,
    status_for_variance,
)
from tests.factories import reconciliation_payload


class TestPageEnvelopes:
    """Tests for the three pagination envelopes the API uses."""

    def test_flat_envelope(self):
        """Test {data, current_page, last_page} at the top level."""
        page = Page[dict].model_validate({
            "data": [{"id": 1}, {"id": 2}],
            "current_page": 1,
            "last_page": 3,
        })
        assert len(page.data) == 2
        assert page.has_more is True

    def test_meta_envelope(self):
        """Test {data, meta: {...}} as returned by the patient list."""
        page = Page[dict].model_validate({
            "data": [{"id": 1}],
            "meta": {"current_page": 2, "last_page": 2, "per_page": 15, "total": 16},
        })
        assert page.current_page == 2
        assert page.total == 16
        assert page.has_more is False

    def test_pagination_envelope_with_rows(self):
        """Test {rows, pagination: {...}} as returned by some reports."""
        page = Page[dict].model_validate({
            "rows": [{"id": 9}],
            "pagination": {"current_page": 1, "last_page": 4},
        })
        assert page.data == [{"id": 9}]
        assert page.last_page == 4

    def test_bare_list_is_single_page(self):
        """Test that an unpaginated list becomes one page."""
        page = Page[int].model_validate([1, 2, 3])
        assert page.data == [1, 2, 3]
        assert page.has_more is False

    def test_empty_page(self):
        """Test the explicit empty state."""
        page = Page[dict].model_validate({"data": [], "current_page": 1, "last_page": 1})
        assert page.is_empty is True


class TestReconciliationModels:
    """Tests for reconciliation records and their invariants."""

    def test_status_for_variance(self):
        """Test the sign of the variance decides the status."""
        assert status_for_variance(Decimal("0")) is ReconciliationStatus.BALANCED
        assert status_for_variance(Decimal("200")) is ReconciliationStatus.OVERAGE
        assert status_for_variance(Decimal("-200")) is ReconciliationStatus.SHORTAGE

    def test_sub_cent_variance_is_balanced(self):
        """Test that anything under half a centavo rounds to balanced."""
        assert status_for_variance(Decimal("0.004")) is ReconciliationStatus.BALANCED
        assert status_for_variance(Decimal("-0.01")) is ReconciliationStatus.SHORTAGE

    def test_reconciliation_parses_api_payload(self):
        """Test a list row from the API."""
        record = Reconciliation.model_validate(reconciliation_payload(expected=5000, actual=5200))
        assert record.status is ReconciliationStatus.OVERAGE
        assert record.variance == Decimal("200")
        assert record.reconciliation_date == date(2025, 3, 14)
        assert record.cashier.name == "Maria Santos"

    def test_variance_must_match_amounts(self):
        """Test that variance != actual - expected is rejected."""
        payload = reconciliation_payload(expected=5000, actual=5200)
        payload["variance"] = 100
        with pytest.raises(ValidationError):
            Reconciliation.model_validate(payload)

    def test_status_must_match_variance_sign(self):
        """Test that an overage with a negative variance is rejected."""
        payload = reconciliation_payload(expected=5000, actual=4800)
        payload["status"] = "overage"
        with pytest.raises(ValidationError):
            Reconciliation.model_validate(payload)

    def test_status_falls_back_to_variance_type(self):
        """Test older payloads that only carry variance_type."""
        payload = reconciliation_payload(expected=5000, actual=4800)
        del payload["status"]
        payload["variance_type"] = "shortage"
        record = Reconciliation.model_validate(payload)
        assert record.status is ReconciliationStatus.SHORTAGE

    def test_status_derived_when_missing(self):
        """Test the status is derived from the variance when absent."""
        payload = reconciliation_payload(expected=100, actual=100)
        del payload["status"]
        record = Reconciliation.model_validate(payload)
        assert record.status is ReconciliationStatus.BALANCED

    def test_negative_amounts_rejected(self):
        """Test that cash amounts cannot be negative."""
        payload = reconciliation_payload(expected=0, actual=0)
        payload["actual_cash"] = -1
        payload["variance"] = -1
        with pytest.raises(ValidationError):
            Reconciliation.model_validate(payload)

    def test_status_labels(self):
        """Test the display labels."""
        assert ReconciliationStatus.BALANCED.label == "Perfectly Balanced"
        assert ReconciliationStatus.OVERAGE.label == "Cash Overage"
        assert ReconciliationStatus.SHORTAGE.label == "Cash Shortage"

    def test_page_with_admin_stats(self):
        """Test the list page carries the admin-only stats block."""
        page = ReconciliationPage.model_validate({
            "data": [reconciliation_payload()],
            "current_page": 1,
            "last_page": 1,
            "stats": {
                "total_reconciliations": 10,
                "balanced_count": 6,
                "overage_count": 3,
                "shortage_count": 1,
                "total_overage": 450.5,
                "total_shortage": 20,
            },
        })
        assert page.stats.balanced_count == 6
        assert page.stats.total_overage == Decimal("450.5")

    def test_page_without_stats(self):
        """Test cashiers get no stats block."""
        page = ReconciliationPage.model_validate({"data": [], "current_page": 1, "last_page": 1})
        assert page.stats is None

    def test_report_stats_spelling(self):
        """Test the report endpoint's field names map onto the same stats."""
        stats = ReconciliationStats.model_validate({
            "total": 4,
            "balanced": 2,
            "overage": 1,
            "shortage": 1,
            "total_overage_amount": 100,
            "total_shortage_amount": 50,
        })
        assert stats.total_reconciliations == 4
        assert stats.total_shortage == Decimal("50")

    def test_submission_serializes_cash_as_number(self):
        """Test the POST body carries actual_cash as a JSON number."""
        body = ReconciliationSubmission(actual_cash=Decimal("5200.50"), notes="  ").model_dump(mode="json")
        assert body == {"actual_cash": 5200.5, "notes": None}


class TestAuthModels:
    """Tests for authentication schemas."""

    def test_user_roles(self):
        """Test role helpers."""
        admin = User(id=1, name="Admin", username="admin", role="admin")
        cashier = User(id=2, name="Cash", username="cash", role="cashier")
        staff = User(id=3, name="Lab", username="lab", role="lab_staff")
        assert admin.is_admin and admin.can_reconcile
        assert cashier.can_reconcile and not cashier.is_admin
        assert not staff.can_reconcile
        assert UserRole.LAB_STAFF.label == "Lab Staff"

    def test_login_request_defaults(self):
        """Test remember defaults to False."""
        body = LoginRequest(username=" msantos ", password="secret").model_dump()
        assert body == {"username": "msantos", "password": "secret", "remember": False}

    def test_otp_must_be_six_digits(self):
        """Test OTP shape."""
        VerifyOtpRequest(email="a@b.co", otp="123456")
        with pytest.raises(ValidationError):
            VerifyOtpRequest(email="a@b.co", otp="12345")

    def test_reset_password_mismatch(self):
        """Test the two passwords must match."""
        with pytest.raises(ValidationError, match="Passwords do not match"):
            ResetPasswordRequest(email="a@b.co", password="one", password_confirmation="two")

    def test_reset_password_token_is_verified(self):
        """Test the literal token the API expects."""
        body = ResetPasswordRequest(email="a@b.co", password="x1", password_confirmation="x1")
        assert body.token == "verified"

    def test_staff_form_email(self):
        """Test staff email shape check."""
        with pytest.raises(ValidationError):
            StaffAccountForm(name="A", username="a", email="not-an-email", password="p", role="cashier")

    def test_staff_update_blank_password(self):
        """Test a blank password means keep the current one."""
        form = StaffAccountUpdate(name="A", username="a", email="a@b.co", role="admin", password="")
        assert form.password is None


class TestOperationsModels:
    """Tests for dashboard, inventory and patient schemas."""

    def test_dashboard_camel_case(self):
        """Test the dashboard's camelCase keys."""
        dashboard = Dashboard.model_validate({
            "stats": {"totalRevenue": 15000, "patientsToday": 12, "lowStockItems": 2, "pendingTests": 5},
            "revenueChartData": [{"label": "Mon", "value": 1200}],
            "lowStockItems": [{"name": "EDTA tubes", "current_stock": 5, "minimum_stock": 20, "unit": "pcs"}],
        })
        assert dashboard.stats.patients_today == 12
        assert dashboard.revenue_chart[0].label == "Mon"
        assert dashboard.low_stock[0].percentage == 25.0

    def test_inventory_overview(self):
        """Test items plus summary."""
        overview = InventoryOverview.model_validate({
            "items": [{"id": 1, "name": "Gloves", "status": "low_stock", "current_stock": 3, "minimum_stock": 10}],
            "summary": {"total_items": 1, "low_stock": 1},
        })
        assert overview.items[0].status is StockStatus.LOW_STOCK
        assert overview.summary.good == 0

    def test_patient_profile_codes_are_strings(self):
        """Test numeric PSGC codes come out as strings."""
        profile = PatientProfile.model_validate({"id": 1, "full_name": "Juan Cruz", "region_id": 13})
        assert profile.region_id == "13"

    def test_patient_update_non_admin_payload(self):
        """Test non-admins never send names, age or gender."""
        form = PatientUpdate(email="j@x.co", first_name="Juan", age=30, gender="male")
        payload = form.to_payload(is_admin=False)
        assert "first_name" not in payload
        assert "age" not in payload
        assert payload["email"] == "j@x.co"

    def test_patient_update_admin_payload(self):
        """Test admins send the restricted fields too."""
        form = PatientUpdate(first_name="Juan", last_name="Cruz", age=30, gender="male")
        payload = form.to_payload(is_admin=True)
        assert payload["first_name"] == "Juan"
        assert payload["age"] == 30

    def test_address_codes(self):
        """Test address lookups accept numeric codes."""
        region = Region.model_validate({"region_id": "13", "name": "NCR"})
        barangay = Barangay.model_validate({"code": 137404001, "name": "Barangay 1"})
        assert region.region_id == "13"
        assert barangay.code == "137404001"


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            description="msantos signed in",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_SAVED,
            entity_type="service",
            entity_id="4",
            description="service updated",
            details={"created": False},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "record_saved"
        assert log_dict["details"]["created"] is False

    def test_audit_event_builder_login_failed(self):
        """Test AuditEventBuilder.login_failed."""
        event = AuditEventBuilder.login_failed(
            username="msantos",
            error_message="Invalid credentials",
            status_code=401,
        )
        assert event.event_type == AuditEventType.LOGIN_FAILED
        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "401"
        assert event.actor == "msantos"

    def test_audit_event_builder_reconciliation_submitted(self):
        """Test AuditEventBuilder.reconciliation_submitted."""
        correlation_id = uuid4()
        event = AuditEventBuilder.reconciliation_submitted(
            actor="msantos",
            reconciliation_id=42,
            expected_cash="5000.00",
            actual_cash="5200.00",
            variance="200.00",
            status="overage",
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.RECONCILIATION_SUBMITTED
        assert event.entity_id == "42"
        assert event.correlation_id == correlation_id
        assert event.details["status"] == "overage"
        assert event.is_user_action is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
