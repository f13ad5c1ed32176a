"""
Price-list schemas: lab services, discounts and PhilHealth plans.

Each of these is an admin-maintained catalog with the same lifecycle:
list, create, update, toggle active.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import ApiModel, Money


SERVICE_CATEGORIES = (
    "Hematology",
    "Clinical Microscopy",
    "Serology/Immunology",
    "Blood Chemistry",
    "Others",
    "Procedure Ultra Sound",
)


class LabService(ApiModel):
    id: int
    name: str
    category: str
    price: Money = Field(..., ge=0)
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


class LabServiceForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1)
    price: Money = Field(..., ge=0)
    description: Optional[str] = None


class Discount(ApiModel):
    id: int
    name: str
    rate: Decimal = Field(..., ge=0, le=100)
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


class DiscountForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    rate: Money = Field(..., ge=0, le=100, description="Percent off")
    description: Optional[str] = None


class PhilHealthPlan(ApiModel):
    id: int
    name: str
    coverage_rate: Decimal = Field(..., ge=0, le=100)
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


class PhilHealthPlanForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    coverage_rate: Money = Field(..., ge=0, le=100, description="Percent covered")
    description: Optional[str] = None
