import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from app.container import get_republish_service
from app.models.fhir.types import resource_type_from_name
from app.services.bulk.republish_service import NDJSON_MEDIA_TYPE, RepublishService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/fhir", tags=["Slot Directory"])


def get_base_url(request: Request) -> str:
    """
    External base URL of this service. A reverse proxy protocol header wins over the request scheme.
    """
    proto = request.headers.get("x-forwarded-proto", request.url.scheme).split(",")[0].strip()
    host = request.headers.get("host", request.url.netloc)
    return f"{proto}://{host}"


@router.get("/$bulk-publish", summary="SMART Scheduling Links bulk publish manifest")
def bulk_publish(
    request: Request,
    service: RepublishService = Depends(get_republish_service),
) -> dict[str, Any]:
    request_line = f"{request.method} {request.url.path}"
    if request.url.query:
        request_line += f"?{request.url.query}"

    manifest = service.build_manifest(get_base_url(request), request_line)
    return manifest.model_dump(by_alias=True, exclude_none=True)


@router.get("/data/{resource_name}.ndjson", summary="NDJSON export of one resource type")
def export_ndjson(
    resource_name: str,
    service: RepublishService = Depends(get_republish_service),
) -> StreamingResponse:
    resource_type = resource_type_from_name(resource_name)
    if resource_type is None:
        raise HTTPException(status_code=404, detail=f"Unknown resource type {resource_name}")

    logger.info("Exporting %s as NDJSON", resource_type.value)
    return StreamingResponse(service.export_ndjson(resource_type), media_type=NDJSON_MEDIA_TYPE)
