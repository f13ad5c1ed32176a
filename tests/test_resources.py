"""Tests for the resource gateways."""

from datetime import date
from decimal import Decimal

import pytest

from src.models.audit import AuditEventType
from src.models.auth import StaffAccountUpdate, UserRole
from src.models.catalog import LabService, LabServiceForm
from src.models.patients import PatientUpdate
from src.queries import DateRange
from src.services.api import AuthenticationError
from src.services.resources import (
    AddressGateway,
    DashboardGateway,
    DiscountGateway,
    InventoryGateway,
    LabQueueGateway,
    PatientGateway,
    ReconciliationGateway,
    ReportGateway,
    ServiceGateway,
    UserGateway,
    clean_filter,
    clean_search,
    group_by_category,
)
from tests.factories import page_payload, reconciliation_payload


def params_of(request) -> dict:
    return dict(request.url.params)


class TestParamHelpers:
    """Tests for clean_search and clean_filter."""

    def test_clean_search(self):
        """Test blank searches are dropped and text is trimmed."""
        assert clean_search(None) is None
        assert clean_search("   ") is None
        assert clean_search(" juan ") == "juan"

    def test_clean_filter(self):
        """Test the "all" choice means no filter."""
        assert clean_filter("all") is None
        assert clean_filter("") is None
        assert clean_filter("pending") == "pending"


class TestCatalogGateways:
    """Tests for services, discounts and users."""

    @pytest.mark.asyncio
    async def test_service_list_params(self, client, backend):
        """Test the services list query string."""
        backend.add("GET", "/services", page_payload([
            {"id": 1, "name": "CBC", "category": "Hematology", "price": 350},
        ]))
        page = await ServiceGateway(client).list(search="  ", category="all")
        assert params_of(backend.requests[0]) == {"page": "1", "per_page": "200"}
        assert page.data[0].price == Decimal("350")

    @pytest.mark.asyncio
    async def test_service_categories(self, client, backend):
        """Test both plain-list and wrapped category payloads."""
        backend.add("GET", "/services/categories", {"data": ["Hematology", "Others"]})
        assert await ServiceGateway(client).categories() == ["Hematology", "Others"]

    @pytest.mark.asyncio
    async def test_create_sends_form(self, client, backend, audit_logger):
        """Test create posts the form and audits it."""
        backend.add("POST", "/services", (201, {"message": "Service created successfully"}))
        form = LabServiceForm(name=" Lipid Profile ", category="Blood Chemistry", price="899.50")
        response = await ServiceGateway(client, audit_logger).create(form)

        assert response.message == "Service created successfully"
        assert backend.body(backend.requests[0]) == {
            "name": "Lipid Profile",
            "category": "Blood Chemistry",
            "price": 899.5,
            "description": None,
        }
        assert audit_logger.history[-1].event_type == AuditEventType.RECORD_SAVED

    @pytest.mark.asyncio
    async def test_toggle_path(self, client, backend, audit_logger):
        """Test toggle hits /{id}/toggle."""
        backend.add("POST", "/discounts/4/toggle", {"message": "Discount status updated"})
        await DiscountGateway(client, audit_logger).toggle(4)
        assert len(backend.calls("POST", "/discounts/4/toggle")) == 1
        event = audit_logger.history[-1]
        assert event.event_type == AuditEventType.RECORD_TOGGLED
        assert event.entity_id == "4"

    @pytest.mark.asyncio
    async def test_user_update_without_password(self, client, backend):
        """Test a blank password is left out so the old one is kept."""
        backend.add("PUT", "/users/9", {"message": "User updated successfully"})
        form = StaffAccountUpdate(
            name="Ana Cruz", username="acruz", email="ana@example.com",
            role=UserRole.LAB_STAFF, password="",
        )
        await UserGateway(client).update(9, form)
        body = backend.body(backend.requests[0])
        assert "password" not in body
        assert body["role"] == "lab_staff"


class TestOperationsGateways:
    """Tests for dashboard, patients, inventory and the lab queue."""

    @pytest.mark.asyncio
    async def test_dashboard_period(self, client, backend):
        """Test the period is passed through."""
        backend.add("GET", "/dashboard", {"stats": {"totalRevenue": 1250.5, "patientsToday": 4}})
        dashboard = await DashboardGateway(client).get("week")
        assert params_of(backend.requests[0]) == {"period": "week"}
        assert dashboard.stats.patients_today == 4

    @pytest.mark.asyncio
    async def test_dashboard_unknown_period(self, client, backend):
        """Test an unknown period is refused without a request."""
        with pytest.raises(ValueError):
            await DashboardGateway(client).get("decade")
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_patient_update_non_admin(self, client, backend, audit_logger):
        """Test non-admins cannot send name, age or gender."""
        backend.add("PUT", "/patients/12", {"message": "Patient updated successfully"})
        form = PatientUpdate(contact_number="09171234567", first_name="Juan", age=40)
        await PatientGateway(client, audit_logger).update(12, form, is_admin=False)
        body = backend.body(backend.requests[0])
        assert body["contact_number"] == "09171234567"
        assert "first_name" not in body
        assert "age" not in body
        assert audit_logger.history[-1].entity_id == "12"

    @pytest.mark.asyncio
    async def test_patient_list(self, client, backend):
        """Test the patient list defaults."""
        backend.add("GET", "/patients", page_payload(
            [{"id": 1, "full_name": "Juan Dela Cruz", "total_spent": 1200}], last_page=4,
        ))
        page = await PatientGateway(client).list(search="juan")
        assert params_of(backend.requests[0]) == {"page": "1", "per_page": "15", "search": "juan"}
        assert page.has_more is True

    @pytest.mark.asyncio
    async def test_inventory_filters(self, client, backend):
        """Test inventory status "all" is not sent."""
        backend.add("GET", "/inventory", {"items": [], "summary": {"total_items": 0}})
        overview = await InventoryGateway(client).list(status="all", search="gloves")
        assert params_of(backend.requests[0]) == {"search": "gloves"}
        assert overview.items == []

    @pytest.mark.asyncio
    async def test_lab_queue_default_status(self, client, backend):
        """Test the queue opens on pending tests."""
        backend.add("GET", "/lab-queue/tests", page_payload([
            {"id": 3, "patient": "Juan Dela Cruz", "test": "CBC", "status": "pending"},
        ]))
        page = await LabQueueGateway(client).tests()
        assert params_of(backend.requests[0])["status"] == "pending"
        assert page.data[0].test == "CBC"


class TestReconciliationGateway:
    """Tests for the reconciliation endpoints."""

    @pytest.mark.asyncio
    async def test_list_with_admin_stats(self, client, backend):
        """Test the stats block rides along with the page."""
        backend.add("GET", "/reconciliations", page_payload(
            [reconciliation_payload(id=2, expected=5000, actual=4800)],
            stats={"total_reconciliations": 1, "shortage_count": 1, "total_shortage": 200},
        ))
        page = await ReconciliationGateway(client).list(status="shortage", search="")
        assert params_of(backend.requests[0]) == {"page": "1", "per_page": "20", "status": "shortage"}
        assert page.stats.shortage_count == 1
        assert page.data[0].variance == Decimal("-200")

    @pytest.mark.asyncio
    async def test_detail(self, client, backend):
        """Test the record and its cash transactions."""
        backend.add("GET", "/reconciliations/2", {
            "reconciliation": reconciliation_payload(id=2),
            "transactions": [{"id": 1, "transaction_number": "TXN-0001", "net_total": 350}],
        })
        detail = await ReconciliationGateway(client).get(2)
        assert detail.reconciliation.id == 2
        assert detail.transactions[0].net_total == Decimal("350")


class TestReportGateway:
    """Tests for report date ranges."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("period, start", [
        ("day", "2025-03-14"),
        ("week", "2025-03-08"),
        ("month", "2025-03-01"),
        ("year", "2025-01-01"),
    ])
    async def test_period_params(self, client, backend, period, start):
        """Test each period resolves to an inclusive range ending today."""
        backend.add("GET", "/reports/financial", page_payload([]))
        reports = ReportGateway(client, today=date(2025, 3, 14))
        await reports.financial(period)
        assert params_of(backend.requests[0]) == {"from": start, "to": "2025-03-14"}

    @pytest.mark.asyncio
    async def test_explicit_range(self, client, backend):
        """Test a custom DateRange is sent as-is."""
        backend.add("GET", "/reports/reconciliation", page_payload([], stats={"total": 0}))
        await ReportGateway(client).reconciliation(
            DateRange(start=date(2025, 2, 1), end=date(2025, 2, 28)),
        )
        assert params_of(backend.requests[0]) == {"from": "2025-02-01", "to": "2025-02-28"}


class TestAddressGateway:
    """Tests for the PSGC lookups."""

    @pytest.mark.asyncio
    async def test_regions_retry_once(self, client, backend, session):
        """Test a 401 right after sign-in is retried."""
        backend.add(
            "GET", "/address/regions",
            (401, {"message": "Unauthenticated."}),
            [{"region_id": 13, "name": "NCR"}],
        )
        await session.set_token("fresh")
        regions = await AddressGateway(client).regions()
        assert regions[0].region_id == "13"
        assert session.get_token() == "fresh"

    @pytest.mark.asyncio
    async def test_barangays_wrapped(self, client, backend, session):
        """Test `{data: [...]}` payloads are unwrapped."""
        backend.add("GET", "/address/barangays/137404", {"data": [{"code": 137404001, "name": "Bagong Silangan"}]})
        await session.set_token("tok")
        barangays = await AddressGateway(client).barangays("137404")
        assert barangays[0].code == "137404001"

    @pytest.mark.asyncio
    async def test_lookup_gives_up(self, client, backend, session):
        """Test a persistent 401 clears the token and raises."""
        backend.add("GET", "/address/regions", (401, {"message": "Unauthenticated."}))
        await session.set_token("revoked")
        with pytest.raises(AuthenticationError):
            await AddressGateway(client).regions()
        assert session.get_token() is None


class TestGroupByCategory:
    """Tests for group_by_category."""

    def test_known_categories_first(self):
        """Test known categories keep their order and unknown ones follow."""
        services = [
            LabService(id=1, name="Ultrasound", category="Procedure Ultra Sound", price=900),
            LabService(id=2, name="CBC", category="Hematology", price=350),
            LabService(id=3, name="Drug Test", category="Toxicology", price=500),
            LabService(id=4, name="Platelet", category="Hematology", price=200),
        ]
        groups = group_by_category(services)
        assert list(groups) == ["Hematology", "Procedure Ultra Sound", "Toxicology"]
        assert [s.id for s in groups["Hematology"]] == [2, 4]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
