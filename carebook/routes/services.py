"""Public catalog routes: the care services on offer and their rates."""

from fastapi import APIRouter, Depends

from carebook.schemas import ServiceOut
from carebook.services.catalog import ServiceCatalog, get_catalog

router = APIRouter(prefix="/services", tags=["services"])


@router.get("", response_model=list[ServiceOut])
async def list_services(catalog: ServiceCatalog = Depends(get_catalog)):
    return catalog.list_active()


@router.get("/{service_id}", response_model=ServiceOut)
async def get_service(service_id: str, catalog: ServiceCatalog = Depends(get_catalog)):
    return await catalog.get(service_id)
