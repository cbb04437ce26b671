import logging
from datetime import datetime, timezone
from typing import Iterator, List

from app.models.bulk.dto import BulkManifest, ManifestOutput
from app.models.fhir.types import SchedulingResources
from app.services.fhir.ndjson import iter_ndjson_lines
from app.services.store.resource_store import ResourceStore

logger = logging.getLogger(__name__)

NDJSON_MEDIA_TYPE = "application/fhir+ndjson"


def ndjson_url(base_url: str, resource_type: SchedulingResources) -> str:
    return f"{base_url.rstrip('/')}/fhir/data/{resource_type.value}.ndjson"


class RepublishService:
    """
    Re-exposes the resource store as a SMART Scheduling Links bulk publication.
    """

    def __init__(self, resource_store: ResourceStore) -> None:
        self.__resource_store = resource_store

    def get_states(self) -> List[str]:
        states = {loc.state for loc in self.__resource_store.get_all_locations() if loc.state is not None}
        return sorted(states)

    def build_manifest(self, base_url: str, request: str) -> BulkManifest:
        output = []
        for resource_type in SchedulingResources:
            entry = ManifestOutput(
                type=resource_type.value,
                url=ndjson_url(base_url, resource_type),
                count=self.__resource_store.count(resource_type),
            )
            if resource_type == SchedulingResources.SLOT:
                states = self.get_states()
                if states:
                    entry.extension = {"state": states}
            output.append(entry)

        return BulkManifest(
            transaction_time=datetime.now(timezone.utc).isoformat(),
            request=request,
            requires_access_token=False,
            output=output,
            error=[],
        )

    def export_ndjson(self, resource_type: SchedulingResources) -> Iterator[str]:
        """
        Yields one clean FHIR resource per line, without any internal bookkeeping fields.
        """
        resources = self.__resource_store.get_all(resource_type)
        logger.debug("Exporting %s %s resources", len(resources), resource_type.value)
        return iter_ndjson_lines(r.to_fhir() for r in resources)
