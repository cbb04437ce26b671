from typing import Any, Callable, Dict
from unittest.mock import MagicMock

import pytest

from app.services.store.in_memory_store import InMemoryResourceStore
from app.services.sync.publisher_sync_service import PublisherSyncService
from tests.services.api.conftest import mock_response


def fake_publishers(routes: Dict[str, Any]) -> Callable[..., MagicMock]:
    """
    Builds a side effect for the patched `request` function. A dict value is served as JSON, a str as
    NDJSON text and an int as an error status code. Unknown URLs return 404.
    """

    def handler(method: str, url: str, **kwargs: Any) -> MagicMock:
        body = routes.get(url)
        if body is None:
            return mock_response(status_code=404, text="not found")
        if isinstance(body, int):
            return mock_response(status_code=body, text="error")
        if isinstance(body, dict):
            return mock_response(json_body=body)
        return mock_response(text=body)

    return handler


@pytest.fixture
def publisher_sync_service(in_memory_store: InMemoryResourceStore) -> PublisherSyncService:
    return PublisherSyncService(resource_store=in_memory_store, timeout=1, retries=1, backoff=0)
