"""
PSGC address lookups for the patient edit form.

These are the calls most likely to race a fresh sign-in, so they go
through `ApiClient.get_with_retry` (one retry after a short wait when a
401 arrives while a token is held).
"""

from src.models.address import Barangay, City, Province, Region
from src.services.api import parse_payload
from src.services.resources.base import ResourceGateway


class AddressGateway(ResourceGateway):

    async def _lookup(self, path: str, model: type) -> list:
        payload = await self._client.get_with_retry(path)
        if isinstance(payload, dict):
            payload = payload.get("data", [])
        return parse_payload(list[model], payload or [], path)

    async def regions(self) -> list[Region]:
        return await self._lookup("/address/regions", Region)

    async def provinces(self, region_id: str) -> list[Province]:
        return await self._lookup(f"/address/provinces/{region_id}", Province)

    async def cities(self, province_id: str) -> list[City]:
        return await self._lookup(f"/address/cities/{province_id}", City)

    async def barangays(self, city_id: str) -> list[Barangay]:
        return await self._lookup(f"/address/barangays/{city_id}", Barangay)
