"""
Data Models Package

Pydantic schemas for every payload that crosses the API boundary.
Responses are validated on the way in; forms are validated before
they are sent.
"""

from src.models.address import Barangay, City, Province, Region
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from src.models.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    SessionState,
    StaffAccount,
    StaffAccountForm,
    StaffAccountUpdate,
    User,
    UserRole,
    VerifyOtpRequest,
)
from src.models.catalog import (
    SERVICE_CATEGORIES,
    Discount,
    DiscountForm,
    LabService,
    LabServiceForm,
    PhilHealthPlan,
    PhilHealthPlanForm,
)
from src.models.common import ApiMessage, Money, NamedRef, Page, quantize_cents
from src.models.operations import (
    Dashboard,
    InventoryItem,
    InventoryMovement,
    InventoryOverview,
    LabQueueSummary,
    LabStatus,
    QueuedTest,
    StockStatus,
)
from src.models.patients import (
    LabTestResult,
    Patient,
    PatientDetail,
    PatientUpdate,
)
from src.models.reconciliation import (
    CashTransaction,
    Reconciliation,
    ReconciliationCreateData,
    ReconciliationDetail,
    ReconciliationPage,
    ReconciliationReceipt,
    ReconciliationStats,
    ReconciliationStatus,
    ReconciliationSubmission,
    VarianceResult,
    status_for_variance,
)
from src.models.reports import (
    AuditLogReport,
    FinancialReport,
    InventoryLogReport,
    LabReport,
    ReconciliationReport,
)

__all__ = [
    # Common
    "ApiMessage",
    "Money",
    "NamedRef",
    "Page",
    "quantize_cents",
    # Auth
    "ForgotPasswordRequest",
    "LoginRequest",
    "LoginResponse",
    "ResetPasswordRequest",
    "SessionState",
    "StaffAccount",
    "StaffAccountForm",
    "StaffAccountUpdate",
    "User",
    "UserRole",
    "VerifyOtpRequest",
    # Reconciliation
    "CashTransaction",
    "Reconciliation",
    "ReconciliationCreateData",
    "ReconciliationDetail",
    "ReconciliationPage",
    "ReconciliationReceipt",
    "ReconciliationStats",
    "ReconciliationStatus",
    "ReconciliationSubmission",
    "VarianceResult",
    "status_for_variance",
    # Patients
    "LabTestResult",
    "Patient",
    "PatientDetail",
    "PatientUpdate",
    # Operations
    "Dashboard",
    "InventoryItem",
    "InventoryMovement",
    "InventoryOverview",
    "LabQueueSummary",
    "LabStatus",
    "QueuedTest",
    "StockStatus",
    # Catalog
    "SERVICE_CATEGORIES",
    "Discount",
    "DiscountForm",
    "LabService",
    "LabServiceForm",
    "PhilHealthPlan",
    "PhilHealthPlanForm",
    # Reports
    "AuditLogReport",
    "FinancialReport",
    "InventoryLogReport",
    "LabReport",
    "ReconciliationReport",
    # Address
    "Barangay",
    "City",
    "Province",
    "Region",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
