import logging
from typing import Any, Dict, List

from requests import JSONDecodeError

from app.services.api.api_service import HttpService

logger = logging.getLogger(__name__)


class PractitionerDirectoryException(Exception):
    pass


class PractitionerDirectoryApi(HttpService):
    """
    Client for a third-party FHIR practitioner directory used for enrichment.
    """

    def __init__(self, base_url: str, timeout: int, retries: int, backoff: float) -> None:
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            retries=retries,
            backoff=backoff,
            accept="application/fhir+json",
        )

    def search_practitioners(self, count: int) -> List[Dict[str, Any]]:
        """
        Fetch the first page of Practitioner resources. Entries that are not Practitioners are dropped.
        """
        response = self.do_request("GET", sub_route="Practitioner", params={"_count": count})
        if response.status_code >= 400:
            raise PractitionerDirectoryException(
                f"Practitioner search on {self.base_url} failed with status {response.status_code}"
            )

        try:
            bundle = response.json()
        except JSONDecodeError:
            raise PractitionerDirectoryException(f"Practitioner search on {self.base_url} returned invalid JSON")

        if not isinstance(bundle, dict):
            raise PractitionerDirectoryException("Practitioner search did not return a Bundle")
        logger.info(
            "Practitioner directory returned bundle %s with total %s",
            bundle.get("resourceType"),
            bundle.get("total"),
        )

        entries = bundle.get("entry")
        if not isinstance(entries, list):
            return []

        resources = (e.get("resource") for e in entries if isinstance(e, dict))
        return [
            r for r in resources
            if isinstance(r, dict) and r.get("resourceType") == "Practitioner"
        ]
