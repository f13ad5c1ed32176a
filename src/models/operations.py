"""
Operational schemas: inventory, lab queue and the dashboard.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from src.models.common import ApiModel, Money


# =============================================================================
# INVENTORY
# =============================================================================

class StockStatus(str, Enum):
    GOOD = "good"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class InventoryItem(ApiModel):
    id: int
    name: str
    category: Optional[str] = None
    current_stock: float = Field(default=0, ge=0)
    minimum_stock: float = Field(default=0, ge=0)
    unit: Optional[str] = None
    status: StockStatus
    is_active: bool = True
    percentage: Optional[float] = None


class InventorySummary(ApiModel):
    total_items: int = 0
    good: int = 0
    low_stock: int = 0
    out_of_stock: int = 0


class InventoryOverview(ApiModel):
    """`GET /inventory`: the filtered items plus the unfiltered summary."""

    items: list[InventoryItem] = Field(default_factory=list)
    summary: InventorySummary = Field(default_factory=InventorySummary)


class InventoryMovement(ApiModel):
    """A stock-in / stock-out / adjustment row (also used by the inventory log report)."""

    id: int
    date: Optional[str] = None  # preformatted by the server
    transaction_code: Optional[str] = None
    item: str
    type: str
    quantity: float
    previous_stock: Optional[float] = None
    new_stock: Optional[float] = None
    reason: Optional[str] = None
    performed_by: Optional[str] = None


# =============================================================================
# LAB QUEUE
# =============================================================================

class LabStatus(str, Enum):
    """Lab queue stages, in processing order."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    RELEASED = "released"


class QueuedTest(ApiModel):
    id: int
    patient: str
    test: str
    status: LabStatus
    price: Money = Field(default=0)
    created_at: Optional[datetime] = None


class QueueCounts(ApiModel):
    pending: int = 0
    processing: int = 0
    completed: int = 0
    released: int = 0


class UpNextTest(ApiModel):
    id: int
    patient: str
    test: str
    status: LabStatus
    created_at: Optional[datetime] = None


class LabQueueSummary(ApiModel):
    """`GET /lab-queue/summary`."""

    counts: QueueCounts = Field(default_factory=QueueCounts)
    up_next: list[UpNextTest] = Field(default_factory=list)


# =============================================================================
# DASHBOARD
# =============================================================================

class DashboardStats(ApiModel):
    total_revenue: Money = Field(default=0, alias="totalRevenue")
    patients_today: int = Field(default=0, alias="patientsToday")
    low_stock_items: int = Field(default=0, alias="lowStockItems")
    pending_tests: int = Field(default=0, alias="pendingTests")


class ChartPoint(ApiModel):
    label: str
    value: float = 0


class LowStockItem(ApiModel):
    name: str
    current_stock: float = 0
    minimum_stock: float = 0
    unit: Optional[str] = None

    @property
    def percentage(self) -> float:
        if not self.minimum_stock:
            return 0.0
        return self.current_stock / self.minimum_stock * 100


class Dashboard(ApiModel):
    """`GET /dashboard?period=...`."""

    stats: DashboardStats = Field(default_factory=DashboardStats)
    revenue_chart: list[ChartPoint] = Field(default_factory=list, alias="revenueChartData")
    low_stock: list[LowStockItem] = Field(default_factory=list, alias="lowStockItems")
