import logging
from typing import Any

from fastapi import APIRouter, Depends

from app.container import get_enrichment_service, get_mass_sync_service
from app.services.enrichment.enrichment_service import EnrichmentService
from app.services.sync.mass_sync_service import MassSyncService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Synchronization"])


@router.post("/sync", summary="Run a sync cycle over all publishers now")
def sync_now(service: MassSyncService = Depends(get_mass_sync_service)) -> dict[str, Any]:
    logger.info("Manual sync requested")
    return service.sync_all().model_dump()


@router.get("/sync/publishers", summary="Configured publisher base URLs")
def get_publishers(service: MassSyncService = Depends(get_mass_sync_service)) -> dict[str, Any]:
    return {"publishers": service.publisher_urls, "running": service.is_running()}


@router.post("/enrich", summary="Run only the enrichment pass")
def enrich_now(service: EnrichmentService = Depends(get_enrichment_service)) -> dict[str, Any]:
    return service.enrich().model_dump()
