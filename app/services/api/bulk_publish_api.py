import logging

from pydantic import ValidationError
from requests import JSONDecodeError

from app.models.bulk.dto import BulkManifest, ManifestOutput
from app.services.api.api_service import HttpService

logger = logging.getLogger(__name__)

BULK_PUBLISH_ROUTE = "$bulk-publish"


class PublisherException(Exception):
    pass


class BulkPublishApi(HttpService):
    """
    Client for one SMART Scheduling Links publisher: the $bulk-publish manifest and the NDJSON
    files it lists.
    """

    def __init__(self, base_url: str, timeout: int, retries: int, backoff: float) -> None:
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            retries=retries,
            backoff=backoff,
            accept="application/json",
        )

    def get_manifest(self) -> BulkManifest:
        response = self.do_request("GET", sub_route=BULK_PUBLISH_ROUTE)
        if response.status_code >= 400:
            logger.error(
                "Publisher %s returned status %s for its manifest", self.base_url, response.status_code
            )
            raise PublisherException(
                f"Manifest request to {self.base_url} failed with status {response.status_code}"
            )

        try:
            data = response.json()
        except JSONDecodeError:
            logger.error("Failed to decode manifest from %s: %s", self.base_url, response.text[:200])
            raise PublisherException(f"Manifest from {self.base_url} is not valid JSON")

        if not isinstance(data, dict) or not isinstance(data.get("output"), list):
            raise PublisherException(f"Malformed manifest from {self.base_url}: output list is missing")

        outputs = []
        for entry in data["output"]:
            try:
                outputs.append(ManifestOutput.model_validate(entry))
            except ValidationError as e:
                logger.error("Dropping malformed manifest output from %s: %s", self.base_url, e)

        try:
            return BulkManifest.model_validate({**data, "output": outputs})
        except ValidationError as e:
            raise PublisherException(f"Malformed manifest from {self.base_url}: {e}")

    def get_ndjson(self, url: str) -> str:
        response = self.do_request("GET", sub_route=url)
        if response.status_code >= 400:
            raise PublisherException(f"NDJSON request to {url} failed with status {response.status_code}")

        return response.text
