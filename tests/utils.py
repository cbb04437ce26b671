from typing import Any, Dict, List

from app.models.fhir.types import SchedulingResources
from app.services.fhir.resources.mapper import map_resource
from app.services.store.resource_store import ResourceStore

TEST_PUBLISHER = "http://publisher-a.test"


def store_resources(
    store: ResourceStore,
    resources: List[Dict[str, Any]],
    publisher_url: str = TEST_PUBLISHER,
) -> None:
    """
    Maps raw FHIR resources and upserts them, one batch per resource type.
    """
    for resource_type in SchedulingResources:
        batch = [
            map_resource(resource_type, r, publisher_url)
            for r in resources
            if r["resourceType"] == resource_type.value
        ]
        if batch:
            store.bulk_upsert(resource_type, batch)
