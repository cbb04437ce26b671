from typing import Any, Dict, List, Literal

from pydantic import BaseModel


class ResourceFileResult(BaseModel):
    resource_type: str
    url: str
    status: Literal["success", "error", "skipped"]
    synced: int = 0
    rejected: int = 0
    error: str | None = None


class PublisherSyncResult(BaseModel):
    publisher_url: str
    status: Literal["success", "error"]
    files: List[ResourceFileResult] = []
    error: str | None = None

    @property
    def synced(self) -> int:
        return sum(f.synced for f in self.files)


class SyncCycleReport(BaseModel):
    status: Literal["success", "skipped"]
    reason: str | None = None
    succeeded: int = 0
    failed: int = 0
    publishers: List[PublisherSyncResult] = []
    enrichment: Dict[str, Any] | None = None
    time: float | None = None
