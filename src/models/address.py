"""
Philippine address lookups (PSGC region -> province -> city -> barangay).
"""

from typing import Any, Optional

from pydantic import field_validator

from src.models.common import ApiModel


class _Place(ApiModel):
    id: Optional[int] = None
    name: str
    code: Optional[str] = None

    @field_validator('*', mode='before')
    @classmethod
    def codes_are_strings(cls, v: Any, info) -> Any:
        if info.field_name not in ("id", "name") and isinstance(v, int):
            return str(v)
        return v


class Region(_Place):
    region_id: str


class Province(_Place):
    province_id: str
    region_id: Optional[str] = None


class City(_Place):
    city_id: str
    province_id: Optional[str] = None


class Barangay(_Place):
    code: str
    city_id: Optional[str] = None
