from datetime import datetime
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException

from app.container import get_resource_store
from app.models.fhir.types import SchedulingResources
from app.models.resources.dto import ResourceDto, ensure_utc
from app.services.store.resource_store import ResourceStore

router = APIRouter(prefix="/api", tags=["Stored resources"])


def _to_api(resources: List[ResourceDto]) -> List[dict[str, Any]]:
    return [r.to_api() for r in resources]


def _get_one(store: ResourceStore, resource_type: SchedulingResources, id: str) -> dict[str, Any]:
    resource = store.get(resource_type, id)
    if resource is None:
        raise HTTPException(status_code=404, detail=f"{resource_type.value} not found")
    return resource.to_api()


@router.get("/locations")
def get_locations(store: ResourceStore = Depends(get_resource_store)) -> List[dict[str, Any]]:
    return _to_api(store.get_all(SchedulingResources.LOCATION))


@router.get("/locations/{id}")
def get_location(id: str, store: ResourceStore = Depends(get_resource_store)) -> dict[str, Any]:
    return _get_one(store, SchedulingResources.LOCATION, id)


@router.get("/practitioners")
def get_practitioners(store: ResourceStore = Depends(get_resource_store)) -> List[dict[str, Any]]:
    return _to_api(store.get_all(SchedulingResources.PRACTITIONER_ROLE))


@router.get("/practitioners/{id}")
def get_practitioner(id: str, store: ResourceStore = Depends(get_resource_store)) -> dict[str, Any]:
    return _get_one(store, SchedulingResources.PRACTITIONER_ROLE, id)


@router.get("/schedules")
def get_schedules(store: ResourceStore = Depends(get_resource_store)) -> List[dict[str, Any]]:
    return _to_api(store.get_all(SchedulingResources.SCHEDULE))


@router.get("/schedules/{id}")
def get_schedule(id: str, store: ResourceStore = Depends(get_resource_store)) -> dict[str, Any]:
    return _get_one(store, SchedulingResources.SCHEDULE, id)


@router.get("/slots", summary="Slots in a date range, only free slots, or all slots")
def get_slots(
    start: datetime | None = None,
    end: datetime | None = None,
    available: bool = False,
    store: ResourceStore = Depends(get_resource_store),
) -> List[dict[str, Any]]:
    if start is not None and end is not None:
        return _to_api(store.get_slots_by_time_range(ensure_utc(start), ensure_utc(end)))  # type: ignore[arg-type]
    if available:
        return _to_api(store.get_available_slots())  # type: ignore[arg-type]
    return _to_api(store.get_all(SchedulingResources.SLOT))


@router.get("/slots/{id}")
def get_slot(id: str, store: ResourceStore = Depends(get_resource_store)) -> dict[str, Any]:
    return _get_one(store, SchedulingResources.SLOT, id)
