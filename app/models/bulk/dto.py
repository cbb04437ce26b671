from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ManifestOutput(BaseModel):
    type: str
    url: str
    count: int | None = None
    extension: Dict[str, Any] | None = None


class BulkManifest(BaseModel):
    """
    SMART Scheduling Links $bulk-publish manifest.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    transaction_time: str | None = None
    request: str | None = None
    requires_access_token: bool = False
    output: List[ManifestOutput]
    error: List[Dict[str, Any]] = Field(default_factory=list)
