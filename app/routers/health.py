import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from app.container import get_database
from app.db.db import Database

logger = logging.getLogger(__name__)
router = APIRouter()


def ok_or_error(value: bool) -> str:
    return "ok" if value else "error"


@router.get("/health")
@router.get("/api/health", include_in_schema=False)
def health(database: Database | None = Depends(get_database)) -> dict[str, Any]:
    logger.debug("Checking health")
    result: dict[str, Any] = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if database is not None:
        db_healthy = database.is_healthy()
        result["database"] = ok_or_error(db_healthy)
        result["status"] = ok_or_error(db_healthy)

    return result
