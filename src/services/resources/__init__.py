"""
Resource Gateways Package

One typed gateway per back-office REST resource.
"""

from src.services.resources.address import AddressGateway
from src.services.resources.base import (
    CatalogGateway,
    ResourceGateway,
    clean_filter,
    clean_search,
)
from src.services.resources.catalog import (
    DiscountGateway,
    PhilHealthPlanGateway,
    ServiceGateway,
    UserGateway,
    group_by_category,
)
from src.services.resources.operations import (
    DashboardGateway,
    InventoryGateway,
    LabQueueGateway,
    PatientGateway,
)
from src.services.resources.reconciliations import ReconciliationGateway
from src.services.resources.reports import ReportGateway

__all__ = [
    # Base
    "CatalogGateway",
    "ResourceGateway",
    "clean_filter",
    "clean_search",
    # Operations
    "DashboardGateway",
    "InventoryGateway",
    "LabQueueGateway",
    "PatientGateway",
    # Catalogs
    "DiscountGateway",
    "PhilHealthPlanGateway",
    "ServiceGateway",
    "UserGateway",
    "group_by_category",
    # Cash
    "ReconciliationGateway",
    # Reports and lookups
    "ReportGateway",
    "AddressGateway",
]
