import logging
from typing import List

from app.models.bulk.dto import ManifestOutput
from app.models.fhir.types import resource_type_from_name
from app.models.resources.dto import ResourceDto
from app.models.sync.dto import PublisherSyncResult, ResourceFileResult
from app.services.api.bulk_publish_api import BulkPublishApi
from app.services.fhir.ndjson import parse_ndjson
from app.services.fhir.resources.mapper import map_resource
from app.services.store.resource_store import ResourceStore

logger = logging.getLogger(__name__)


class PublisherSyncService:
    """
    Pulls one publisher's manifest and every NDJSON file it lists into the resource store. A file
    that cannot be fetched or parsed is skipped without affecting the other files.
    """

    def __init__(
        self,
        resource_store: ResourceStore,
        timeout: int,
        retries: int,
        backoff: float,
    ) -> None:
        self.__resource_store = resource_store
        self.__timeout = timeout
        self.__retries = retries
        self.__backoff = backoff

    def create_api(self, publisher_url: str) -> BulkPublishApi:
        return BulkPublishApi(
            base_url=publisher_url,
            timeout=self.__timeout,
            retries=self.__retries,
            backoff=self.__backoff,
        )

    def sync(self, publisher_url: str) -> PublisherSyncResult:
        api = self.create_api(publisher_url)
        manifest = api.get_manifest()
        logger.info(
            "Manifest from %s lists %s files (transactionTime %s)",
            publisher_url,
            len(manifest.output),
            manifest.transaction_time,
        )

        files = [self.__sync_file(api, publisher_url, output) for output in manifest.output]
        return PublisherSyncResult(publisher_url=publisher_url, status="success", files=files)

    def __sync_file(self, api: BulkPublishApi, publisher_url: str, output: ManifestOutput) -> ResourceFileResult:
        resource_type = resource_type_from_name(output.type)
        if resource_type is None:
            logger.info("Ignoring unsupported resource type %s from %s", output.type, publisher_url)
            return ResourceFileResult(resource_type=output.type, url=output.url, status="skipped")

        try:
            raw_resources = parse_ndjson(api.get_ndjson(output.url))

            records: List[ResourceDto] = []
            rejected = 0
            for data in raw_resources:
                try:
                    records.append(map_resource(resource_type, data, publisher_url))
                except ValueError as e:
                    rejected += 1
                    logger.warning(
                        "Skipping invalid %s %s from %s: %s",
                        resource_type.value,
                        data.get("id"),
                        publisher_url,
                        e,
                    )

            stored = self.__resource_store.bulk_upsert(resource_type, records)
        except Exception as e:
            logger.exception("Failed to sync %s from %s", output.url, publisher_url)
            return ResourceFileResult(
                resource_type=resource_type.value,
                url=output.url,
                status="error",
                error=str(e),
            )

        logger.info("Synced %s %s resources from %s", len(stored), resource_type.value, publisher_url)
        return ResourceFileResult(
            resource_type=resource_type.value,
            url=output.url,
            status="success",
            synced=len(stored),
            rejected=rejected,
        )
