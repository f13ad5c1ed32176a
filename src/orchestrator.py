"""
Main Orchestrator for the BP Diagnostic back-office client

Ties the components together so a front end only has to ask for them:

    storage -> TokenSession -> ApiClient -> AuthService
                                        -> resource gateways
                                        -> ReconciliationWorkflow

DESIGN DECISION: There is exactly one TokenSession per set of
components, and it is passed explicitly to the ApiClient. Nothing reads
the token from a module global, so two component sets (e.g. two test
cases) never see each other's sign-in.
"""

from typing import Optional

import httpx
import structlog

from src.audit import AuditLogger, configure_logging
from src.config import Settings, get_settings
from src.reconciliation import ReconciliationWorkflow
from src.services.api import ApiClient
from src.services.auth import AuthService
from src.services.resources import (
    AddressGateway,
    DashboardGateway,
    DiscountGateway,
    InventoryGateway,
    LabQueueGateway,
    PatientGateway,
    PhilHealthPlanGateway,
    ReconciliationGateway,
    ReportGateway,
    ServiceGateway,
    UserGateway,
)
from src.services.session import TokenSession
from src.services.storage import (
    FileTokenStorage,
    MemoryTokenStorage,
    TokenStorageInterface,
)


logger = structlog.get_logger(__name__)


class AppComponents:
    """Everything a screen needs, wired to one session."""

    def __init__(
        self,
        settings: Settings,
        session: TokenSession,
        client: ApiClient,
        audit_logger: AuditLogger,
    ):
        self.settings = settings
        self.session = session
        self.client = client
        self.audit_logger = audit_logger

        self.auth = AuthService(client, audit_logger=audit_logger)

        self.dashboard = DashboardGateway(client, audit_logger)
        self.patients = PatientGateway(client, audit_logger)
        self.inventory = InventoryGateway(client, audit_logger)
        self.lab_queue = LabQueueGateway(client, audit_logger)
        self.services = ServiceGateway(client, audit_logger)
        self.discounts = DiscountGateway(client, audit_logger)
        self.philhealth_plans = PhilHealthPlanGateway(client, audit_logger)
        self.users = UserGateway(client, audit_logger)
        self.reconciliations = ReconciliationGateway(client, audit_logger)
        self.reports = ReportGateway(client, audit_logger)
        self.address = AddressGateway(client, audit_logger)

        self.reconciliation = ReconciliationWorkflow(
            self.reconciliations,
            audit_logger=audit_logger,
            actor=self._current_username,
            per_page=settings.app.default_per_page,
        )

    def _current_username(self) -> Optional[str]:
        user = self.auth.user
        return user.username if user else None

    async def aclose(self) -> None:
        await self.client.aclose()


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[TokenStorageInterface] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    persist_session: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Defaults to the cached environment settings
        storage: Token storage; defaults to the session file from settings
        transport: httpx transport override (tests pass a MockTransport)
        persist_session: False keeps the token in memory only

    Returns:
        AppComponents bound to a fresh TokenSession
    """
    settings = settings or get_settings()
    configure_logging(settings.app.log_level)

    if storage is None:
        if persist_session:
            storage = FileTokenStorage(settings.session.resolved_token_path)
        else:
            storage = MemoryTokenStorage()

    audit_logger = AuditLogger()
    session = TokenSession(storage, storage_key=settings.session.storage_key)
    client = ApiClient(
        session,
        settings=settings.api,
        audit_logger=audit_logger,
        transport=transport,
    )

    logger.info(
        "app_components_created",
        base_url=settings.api.base_url,
        storage=type(storage).__name__,
        environment=settings.app.app_environment,
    )
    return AppComponents(settings, session, client, audit_logger)
