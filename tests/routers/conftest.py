from fastapi.testclient import TestClient
import pytest

from app.container import get_resource_store
from app.services.store.resource_store import ResourceStore
from tests import mock_data
from tests.utils import store_resources


@pytest.fixture
def app_store(api_client: TestClient) -> ResourceStore:
    return get_resource_store()


@pytest.fixture
def populated_store(app_store: ResourceStore) -> ResourceStore:
    store_resources(
        app_store,
        [
            mock_data.location(id="loc-1", state="NY"),
            mock_data.location(id="loc-2", name="Harbor Clinic", city="Worcester", state="MA", postal_code="01608"),
            mock_data.practitioner_role(id="role-1", display="Dr. Jane Smith", location_ids=["loc-1"]),
            mock_data.practitioner_role(
                id="role-2", display="Dr. Robert Brown", specialty="Cardiology", location_ids=["loc-2"]
            ),
            mock_data.schedule(id="sched-2", role_id="role-2", location_id="loc-2"),
            mock_data.slot(
                id="slot-1",
                schedule_id="sched-2",
                start=mock_data.in_days(1),
                extensions=[mock_data.booking_phone_extension("617-555-0199")],
            ),
            mock_data.slot(id="slot-2", schedule_id="sched-2", start=mock_data.in_days(2), status="busy"),
        ],
    )
    return app_store
