from typing import Any, Dict
from unittest.mock import MagicMock

import pytest
from requests import JSONDecodeError

from app.services.api.api_service import HttpService
from app.services.api.bulk_publish_api import BulkPublishApi
from app.services.api.practitioner_directory_api import PractitionerDirectoryApi


class PlainHttpService(HttpService):
    pass


def mock_response(status_code: int = 200, json_body: Any = None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if json_body is None:
        response.json.side_effect = JSONDecodeError("Expecting value", text, 0)
    else:
        response.json.return_value = json_body
    return response


@pytest.fixture()
def base_url() -> str:
    return "http://example.com"


@pytest.fixture()
def mock_params() -> Dict[str, Any]:
    return {"param": "example"}


@pytest.fixture()
def http_service(base_url: str) -> HttpService:
    return PlainHttpService(base_url=base_url, timeout=1, retries=1, backoff=0)


@pytest.fixture()
def bulk_publish_api() -> BulkPublishApi:
    return BulkPublishApi(base_url="http://publisher-a.test/", timeout=1, retries=1, backoff=0)


@pytest.fixture()
def directory_api() -> PractitionerDirectoryApi:
    return PractitionerDirectoryApi(base_url="http://directory.test/R4", timeout=1, retries=1, backoff=0)
