"""Service catalog: static reference data for the care services on offer.

Loaded once from JSON at startup. Rates are whole BDT per hour / per day.
"""

import enum
import logging
from collections.abc import Iterable
from pathlib import Path

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from carebook.models.booking import DurationUnit
from carebook.services.errors import NotFound

logger = logging.getLogger(__name__)


class ServiceCategory(enum.StrEnum):
    CHILD = "child"
    ELDERLY = "elderly"
    SICK = "sick"


class CatalogService(BaseModel):
    model_config = ConfigDict(frozen=True)

    service_id: str
    name: str
    short_description: str = ""
    category: ServiceCategory
    charge_per_hour: int = Field(ge=0)
    charge_per_day: int = Field(ge=0)
    is_active: bool = True

    def rate_for(self, unit: DurationUnit) -> int:
        if unit == DurationUnit.HOURS:
            return self.charge_per_hour
        return self.charge_per_day


_services_adapter = TypeAdapter(list[CatalogService])


class ServiceCatalog:
    def __init__(self, services: Iterable[CatalogService]):
        self._services = {s.service_id: s for s in services}

    @classmethod
    def from_json(cls, path: str | Path) -> "ServiceCatalog":
        services = _services_adapter.validate_json(Path(path).read_bytes())
        logger.info("Loaded %d catalog services from %s", len(services), path)
        return cls(services)

    async def get(self, service_id: str) -> CatalogService:
        """Look up an active service. Raises NotFound for unknown or retired services."""
        service = self._services.get(service_id)
        if service is None or not service.is_active:
            raise NotFound("Service not found")
        return service

    def list_active(self) -> list[CatalogService]:
        return [s for s in self._services.values() if s.is_active]


def get_catalog(request: Request) -> ServiceCatalog:
    return request.app.state.catalog
