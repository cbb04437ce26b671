from abc import ABC
import logging
import time
from typing import Dict, Any
from requests import request, Response
from requests.exceptions import Timeout, ConnectionError
from yarl import URL

logger = logging.getLogger(__name__)


class HttpService(ABC):
    """
    Base class for making HTTP requests with a bounded timeout and retry logic
    """

    def __init__(
        self,
        base_url: str,
        timeout: int,
        retries: int,
        backoff: float,
        accept: str = "application/json",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.accept = accept
        self.__timeout = timeout
        self.__retries = max(1, retries)
        self.__backoff = backoff

    def do_request(
        self,
        method: str,
        sub_route: str | None = None,
        params: Dict[str, Any] | None = None,
    ) -> Response:
        """
        Perform an HTTP request. sub_route may also be an absolute URL, as found in manifests.
        """
        headers = self.make_headers()
        url = self.make_target_url(sub_route, params)

        for attempt in range(self.__retries):
            try:
                logger.info(f"Making HTTP {method} request to {url}")
                response = request(
                    method=method,
                    url=str(url),
                    headers=headers,
                    timeout=self.__timeout,
                )
                return response
            except (
                ConnectionError,
                Timeout,
            ):
                logger.warning(f"Failed to make request to {url} on attempt {attempt}")

                # Connection error or timeout, we can retry with an exponential backoff until
                # we reach the max retries
                if attempt < self.__retries - 1:
                    logger.info(f"Retrying in {self.__backoff * (2**attempt)} seconds")
                    time.sleep(self.__backoff * (2**attempt))

        logger.error(f"Failed to make request to {url} after {self.__retries} attempts")
        raise ConnectionError("Failed to make request after too many retries")

    def make_headers(self) -> Dict[str, Any]:
        return {"Accept": self.accept}

    def make_target_url(
        self, sub_route: str | None = None, params: Dict[str, Any] | None = None
    ) -> URL:
        url = self.base_url
        if sub_route and sub_route.startswith(("http://", "https://")):
            url = sub_route
        elif sub_route:
            url = f"{url}/{sub_route.lstrip('/')}"

        target = URL(url, encoded=True)
        if params:
            return target.update_query(params)

        return target
