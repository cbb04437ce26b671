from typing import Any

from fastapi import APIRouter

router = APIRouter()


@router.get("/", summary="Service banner")
def index() -> dict[str, Any]:
    return {
        "name": "SMART Scheduling Links aggregator",
        "bulk_publish": "/fhir/$bulk-publish",
        "search": "/api/search",
        "health": "/health",
    }
