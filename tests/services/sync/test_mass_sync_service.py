import threading
from unittest.mock import MagicMock, patch

from requests.exceptions import ConnectionError

from app.models.enrichment.dto import EnrichmentReport
from app.models.sync.dto import PublisherSyncResult
from app.services.store.in_memory_store import InMemoryResourceStore
from app.services.sync.mass_sync_service import MassSyncService
from app.services.sync.publisher_sync_service import PublisherSyncService
from app.stats import MemoryClient, NoopStats, Statsd
from tests import mock_data
from tests.services.sync.conftest import fake_publishers

PATCHED_MODULE = "app.services.api.api_service.request"

PUBLISHER_A = "http://publisher-a.test"
PUBLISHER_B = "http://publisher-b.test"
PUBLISHER_C = "http://publisher-c.test"


def three_publishers() -> dict:
    routes: dict = {}
    for base, suffix in ((PUBLISHER_A, "a"), (PUBLISHER_C, "c")):
        routes[f"{base}/$bulk-publish"] = mock_data.manifest(base, ["Location", "Slot"])
        routes[f"{base}/data/Location.ndjson"] = mock_data.ndjson([mock_data.location(id=f"loc-{suffix}")])
        routes[f"{base}/data/Slot.ndjson"] = mock_data.ndjson([mock_data.slot(id=f"slot-{suffix}")])
    routes[f"{PUBLISHER_B}/$bulk-publish"] = 500
    return routes


def create_service(store: InMemoryResourceStore, max_concurrent: int = 1, **kwargs) -> MassSyncService:
    return MassSyncService(
        publisher_sync_service=PublisherSyncService(store, timeout=1, retries=1, backoff=0),
        publisher_urls=[PUBLISHER_A, PUBLISHER_B, PUBLISHER_C],
        stats=kwargs.pop("stats", NoopStats()),
        max_concurrent_publisher_syncs=max_concurrent,
        **kwargs,
    )


@patch(PATCHED_MODULE)
def test_partial_publisher_failure(mock_request: MagicMock, in_memory_store: InMemoryResourceStore) -> None:
    mock_request.side_effect = fake_publishers(three_publishers())

    report = create_service(in_memory_store).sync_all()

    assert report.status == "success"
    assert report.succeeded == 2
    assert report.failed == 1
    assert [p.publisher_url for p in report.publishers] == [PUBLISHER_A, PUBLISHER_B, PUBLISHER_C]
    assert report.publishers[1].status == "error"
    assert sorted(loc.id for loc in in_memory_store.get_all_locations()) == ["loc-a", "loc-c"]
    assert sorted(s.id for s in in_memory_store.get_all_slots()) == ["slot-a", "slot-c"]


@patch(PATCHED_MODULE)
def test_partial_publisher_failure_concurrent(mock_request: MagicMock, in_memory_store: InMemoryResourceStore) -> None:
    mock_request.side_effect = fake_publishers(three_publishers())

    report = create_service(in_memory_store, max_concurrent=3).sync_all()

    assert report.succeeded == 2
    assert report.failed == 1
    assert [p.publisher_url for p in report.publishers] == [PUBLISHER_A, PUBLISHER_B, PUBLISHER_C]
    assert sorted(s.id for s in in_memory_store.get_all_slots()) == ["slot-a", "slot-c"]


@patch(PATCHED_MODULE)
def test_total_failure_completes_cycle(mock_request: MagicMock, in_memory_store: InMemoryResourceStore) -> None:
    mock_request.side_effect = ConnectionError("unreachable")

    report = create_service(in_memory_store).sync_all()

    assert report.status == "success"
    assert report.succeeded == 0
    assert report.failed == 3
    assert in_memory_store.get_all_slots() == []


@patch(PATCHED_MODULE)
def test_sync_cycle_records_stats(mock_request: MagicMock, in_memory_store: InMemoryResourceStore) -> None:
    mock_request.side_effect = fake_publishers(three_publishers())
    client = MemoryClient()

    create_service(in_memory_store, stats=Statsd(client)).sync_all()

    memory = client.get_memory()
    assert len(memory["sync_all_publishers"]) == 1
    assert memory["sync.publishers.succeeded"] == 2
    assert memory["sync.publishers.failed"] == 1


@patch(PATCHED_MODULE)
def test_enrichment_runs_after_sync(mock_request: MagicMock, in_memory_store: InMemoryResourceStore) -> None:
    mock_request.side_effect = fake_publishers(three_publishers())
    enrichment_service = MagicMock()
    enrichment_service.enrich.return_value = EnrichmentReport(status="success", fetched=3, matched=1)

    report = create_service(in_memory_store, enrichment_service=enrichment_service).sync_all()

    enrichment_service.enrich.assert_called_once()
    assert report.enrichment is not None
    assert report.enrichment["matched"] == 1


def test_second_trigger_is_skipped_while_running(in_memory_store: InMemoryResourceStore) -> None:
    started = threading.Event()
    release = threading.Event()

    def slow_sync(url: str) -> PublisherSyncResult:
        started.set()
        release.wait(5)
        return PublisherSyncResult(publisher_url=url, status="success")

    publisher_sync_service = MagicMock()
    publisher_sync_service.sync.side_effect = slow_sync
    service = MassSyncService(
        publisher_sync_service=publisher_sync_service,
        publisher_urls=[PUBLISHER_A],
        stats=NoopStats(),
    )

    first_reports = []
    thread = threading.Thread(target=lambda: first_reports.append(service.sync_all()))
    thread.start()
    assert started.wait(5)

    second = service.sync_all()
    assert service.is_running() is True
    release.set()
    thread.join(5)

    assert second.status == "skipped"
    assert second.reason == "already_running"
    assert first_reports[0].status == "success"
    assert publisher_sync_service.sync.call_count == 1
    assert service.is_running() is False

    # Once the cycle finished a new trigger runs again
    assert service.sync_all().status == "success"
