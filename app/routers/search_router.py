from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends

from app.container import get_query_engine
from app.models.search.dto import SearchFilters
from app.services.search.query_engine import QueryEngine

router = APIRouter(prefix="/api", tags=["Search"])


@router.post("/search", summary="Search practitioners, locations and slots")
def search(
    filters: SearchFilters,
    query_engine: QueryEngine = Depends(get_query_engine),
) -> dict[str, Any]:
    return query_engine.search(filters).to_api()


@router.get("/availability/{provider_id}", summary="Slots of one PractitionerRole within a time window")
def provider_availability(
    provider_id: str,
    start: datetime | None = None,
    end: datetime | None = None,
    query_engine: QueryEngine = Depends(get_query_engine),
) -> dict[str, Any]:
    return query_engine.get_provider_availability(provider_id, start, end).to_api()
