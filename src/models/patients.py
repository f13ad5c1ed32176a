"""
Patient record schemas.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.common import ApiDate, ApiModel, Money


class Patient(ApiModel):
    """A row on the patient list."""

    id: int
    full_name: str
    age: Optional[int] = Field(default=None, ge=0)
    gender: Optional[str] = None
    contact_number: Optional[str] = None
    last_visit: Optional[ApiDate] = None
    last_visit_amount: Optional[Money] = None
    total_transactions: int = Field(default=0, ge=0)
    total_spent: Money = Field(default=0)


class PatientProfile(ApiModel):
    """Full demographic profile, including the PSGC address codes."""

    id: int
    full_name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    middle_name: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)
    gender: Optional[str] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[ApiDate] = None
    address: Optional[str] = None
    region_id: Optional[str] = None
    province_id: Optional[str] = None
    city_id: Optional[str] = None
    barangay_code: Optional[str] = None
    street: Optional[str] = None

    @field_validator('region_id', 'province_id', 'city_id', 'barangay_code', mode='before')
    @classmethod
    def codes_are_strings(cls, v: Any) -> Any:
        # some rows come back with numeric codes
        return str(v) if isinstance(v, int) else v


class PatientStats(ApiModel):
    total_transactions: int = 0
    pending_tests: int = 0
    completed_tests: int = 0


class OrderedTest(ApiModel):
    id: int
    name: str
    status: str
    price: Money = Field(default=0)


class PatientTransaction(ApiModel):
    id: int
    transaction_number: str
    net_total: Money
    payment_status: Optional[str] = None
    lab_status: Optional[str] = None
    created_at: Optional[datetime] = None
    tests: list[OrderedTest] = Field(default_factory=list)


class PatientDetail(ApiModel):
    """`GET /patients/{id}`."""

    patient: PatientProfile
    stats: PatientStats = Field(default_factory=PatientStats)
    recent_transactions: list[PatientTransaction] = Field(default_factory=list)


class LabTestResult(ApiModel):
    """`GET /tests/{id}`: one ordered test with its results."""

    id: int
    test_name: str
    category: Optional[str] = None
    price: Money = Field(default=0)
    status: str
    processed_by: Optional[str] = None
    completed_at: Optional[datetime] = None
    released_at: Optional[datetime] = None
    result_values: dict[str, Any] = Field(default_factory=dict)
    normal_range: Optional[str] = None
    notes: Optional[str] = None
    images: list[str] = Field(default_factory=list)


class PatientUpdate(BaseModel):
    """
    Edit form for `PUT /patients/{id}`.

    Contact and address fields are editable by everyone. Names, age and
    gender are admin-only; `to_payload` leaves them out otherwise.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    email: Optional[str] = None
    contact_number: Optional[str] = None
    region_id: Optional[str] = None
    province_id: Optional[str] = None
    city_id: Optional[str] = None
    barangay_code: Optional[str] = None
    street: Optional[str] = None

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    middle_name: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0, le=150)
    gender: Optional[str] = None

    def to_payload(self, is_admin: bool) -> dict[str, Any]:
        payload = {
            "email": self.email or None,
            "contact_number": self.contact_number or None,
            "region_id": self.region_id or None,
            "province_id": self.province_id or None,
            "city_id": self.city_id or None,
            "barangay_code": self.barangay_code or None,
            "street": self.street or None,
        }
        if is_admin:
            payload.update(
                first_name=self.first_name,
                last_name=self.last_name,
                middle_name=self.middle_name or None,
                age=self.age or 0,
                gender=self.gender,
            )
        return payload
