from typing import Any

from fastapi import APIRouter, Depends

from app.container import get_scheduler
from app.services.scheduler import Scheduler

router = APIRouter(prefix="/scheduler", tags=["Scheduled background sync"])


@router.post("/start", summary="Starts background scheduled syncs")
def start_scheduled_sync(service: Scheduler = Depends(get_scheduler)) -> dict[str, Any]:
    service.start()
    return {"running": service.is_running()}


@router.post("/stop", summary="Stops background scheduled syncs")
def stop_scheduled_sync(service: Scheduler = Depends(get_scheduler)) -> dict[str, Any]:
    service.stop()
    return {"running": service.is_running()}


@router.get("/runner_logs")
def get_runner_history_logs(
    service: Scheduler = Depends(get_scheduler),
) -> list[dict[str, Any]]:
    return service.get_runner_history()
