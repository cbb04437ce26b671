from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest
from requests.exceptions import ConnectionError

from app.services.enrichment.enrichment_service import EnrichmentService
from app.services.enrichment.name_matcher import TokenOverlapNameMatcher
from app.services.store.resource_store import ResourceStore
from tests import mock_data
from tests.utils import store_resources


@pytest.fixture
def directory_api() -> MagicMock:
    return MagicMock()


def create_service(
    store: ResourceStore,
    directory_api: MagicMock,
    practitioners: List[Dict[str, Any]] | None = None,
    demo_mode: bool = False,
    enabled: bool = True,
) -> EnrichmentService:
    directory_api.search_practitioners.return_value = practitioners or []
    return EnrichmentService(
        resource_store=store,
        directory_api=directory_api,
        name_matcher=TokenOverlapNameMatcher(),
        page_size=100,
        enabled=enabled,
        demo_mode=demo_mode,
    )


def test_enrich_merges_directory_data_onto_matching_role(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(
        store,
        [
            mock_data.practitioner_role(id="role-1", display="Dr. Jane Smith"),
            mock_data.practitioner_role(id="role-2", display="Dr. Robert Brown"),
        ],
    )
    service = create_service(store, directory_api, [mock_data.directory_practitioner(npi="1999999999")])

    report = service.enrich()

    assert report.status == "success"
    assert report.fetched == 1
    assert report.matched == 1
    assert report.demo_seeded is False
    directory_api.search_practitioners.assert_called_once_with(100)

    role = store.get_practitioner_role("role-1")
    assert role is not None
    assert role.npi == "1999999999"
    assert role.languages_spoken == [{"language": "Spanish", "code": "es"}]
    assert role.education == [{"degree": "Doctor of Medicine degree", "institution": "Boston University", "period": None}]
    assert role.board_certifications is not None and len(role.board_certifications) == 1
    assert role.insurance_accepted is not None and {"type": "Medicare", "accepted": True} in role.insurance_accepted
    assert role.enrichment_data is not None
    assert role.enrichment_data["fullName"] == "Dr. Jane Smith"
    assert role.enrichment_data["source"] == "practitioner_directory"

    other = store.get_practitioner_role("role-2")
    assert other is not None and other.npi is None


def test_enrich_never_overwrites_role_with_npi(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(store, [mock_data.practitioner_role(id="role-1", display="Dr. Jane Smith")])
    store.update_practitioner_role("role-1", npi="1111111111", languages_spoken=[{"language": "French", "code": "fr"}])
    service = create_service(store, directory_api, [mock_data.directory_practitioner(npi="1999999999")])

    report = service.enrich()

    assert report.matched == 0
    role = store.get_practitioner_role("role-1")
    assert role is not None
    assert role.npi == "1111111111"
    assert role.languages_spoken == [{"language": "French", "code": "fr"}]


def test_enrich_skips_entries_without_npi(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(store, [mock_data.practitioner_role(id="role-1", display="Dr. Jane Smith")])
    service = create_service(store, directory_api, [mock_data.directory_practitioner(npi=None)])

    report = service.enrich()

    assert report.without_npi == 1
    assert report.matched == 0
    role = store.get_practitioner_role("role-1")
    assert role is not None and role.npi is None


def test_enrich_skips_npi_already_assigned(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(
        store,
        [
            mock_data.practitioner_role(id="role-1", display="Dr. Jane Smith"),
            mock_data.practitioner_role(id="role-2", display="Dr. Jane Smith"),
        ],
    )
    store.update_practitioner_role("role-1", npi="1999999999")
    service = create_service(store, directory_api, [mock_data.directory_practitioner(npi="1999999999")])

    report = service.enrich()

    assert report.matched == 0
    role = store.get_practitioner_role("role-2")
    assert role is not None and role.npi is None


def test_enrich_matches_each_role_once(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(store, [mock_data.practitioner_role(id="role-1", display="Dr. Jane Smith")])
    service = create_service(
        store,
        directory_api,
        [
            mock_data.directory_practitioner(id="opt-1", npi="1999999999"),
            mock_data.directory_practitioner(id="opt-2", npi="1888888888"),
        ],
    )

    report = service.enrich()

    assert report.matched == 1
    role = store.get_practitioner_role("role-1")
    assert role is not None and role.npi == "1999999999"


def test_enrich_ignores_invalid_directory_entries(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(store, [mock_data.practitioner_role(id="role-1", display="Dr. Jane Smith")])
    invalid = mock_data.directory_practitioner(npi="1999999999")
    invalid["gender"] = {"not": "a code"}
    service = create_service(store, directory_api, [invalid])

    report = service.enrich()

    assert report.fetched == 1
    assert report.matched == 0


def test_demo_mode_seeds_first_unenriched_role(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(store, [mock_data.practitioner_role(id="role-1", display="Dr. Alex Lee")])
    service = create_service(store, directory_api, [], demo_mode=True)

    report = service.enrich()

    assert report.matched == 0
    assert report.demo_seeded is True
    role = store.get_practitioner_role("role-1")
    assert role is not None
    assert role.npi == "1234567890"
    assert role.enrichment_data is not None and role.enrichment_data["source"] == "demo"


def test_demo_data_is_not_seeded_outside_demo_mode(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(store, [mock_data.practitioner_role(id="role-1", display="Dr. Alex Lee")])
    service = create_service(store, directory_api, [], demo_mode=False)

    report = service.enrich()

    assert report.demo_seeded is False
    role = store.get_practitioner_role("role-1")
    assert role is not None and role.npi is None


def test_demo_mode_does_not_touch_enriched_roles(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(store, [mock_data.practitioner_role(id="role-1", display="Dr. Alex Lee")])
    store.update_practitioner_role("role-1", npi="1111111111")
    service = create_service(store, directory_api, [], demo_mode=True)

    report = service.enrich()

    assert report.demo_seeded is False
    role = store.get_practitioner_role("role-1")
    assert role is not None and role.npi == "1111111111"


def test_directory_failure_reports_error(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(store, [mock_data.practitioner_role(id="role-1", display="Dr. Jane Smith")])
    service = create_service(store, directory_api, demo_mode=True)
    directory_api.search_practitioners.side_effect = ConnectionError("directory down")

    report = service.enrich()

    assert report.status == "error"
    assert report.error == "directory down"
    assert report.demo_seeded is False
    role = store.get_practitioner_role("role-1")
    assert role is not None and role.npi is None


def test_disabled_enrichment_does_nothing(store: ResourceStore, directory_api: MagicMock) -> None:
    service = create_service(store, directory_api, enabled=False)

    report = service.enrich()

    assert report.status == "disabled"
    directory_api.search_practitioners.assert_not_called()


def test_demo_mode_seeds_a_single_role_across_passes(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(
        store,
        [
            mock_data.practitioner_role(id="role-1", display="Dr. Alex Lee"),
            mock_data.practitioner_role(id="role-2", display="Dr. Sam Park"),
            mock_data.practitioner_role(id="role-3", display="Dr. Kim Chen"),
        ],
    )
    service = create_service(store, directory_api, [], demo_mode=True)

    reports = [service.enrich() for _ in range(3)]

    assert [r.demo_seeded for r in reports] == [True, False, False]
    seeded = [r for r in store.get_all_practitioner_roles() if r.npi == "1234567890"]
    assert len(seeded) == 1
    assert len([r for r in store.get_all_practitioner_roles() if r.npi is None]) == 2


def test_enrich_leaves_role_enriched_during_the_pass(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(store, [mock_data.practitioner_role(id="role-1", display="Dr. Jane Smith")])
    directory_api.search_practitioners.return_value = [mock_data.directory_practitioner(npi="1999999999")]

    def match_after_concurrent_write(full_name: str, candidates: List[Any]) -> Any:
        store.update_practitioner_role("role-1", npi="1111111111", languages_spoken=[{"language": "French"}])
        return candidates[0]

    name_matcher = MagicMock()
    name_matcher.match.side_effect = match_after_concurrent_write
    service = EnrichmentService(
        resource_store=store,
        directory_api=directory_api,
        name_matcher=name_matcher,
        page_size=100,
    )

    report = service.enrich()

    assert report.status == "success"
    assert report.matched == 0
    role = store.get_practitioner_role("role-1")
    assert role is not None
    assert role.npi == "1111111111"
    assert role.languages_spoken == [{"language": "French"}]


def test_enrich_skips_while_a_pass_is_running(store: ResourceStore, directory_api: MagicMock) -> None:
    store_resources(store, [mock_data.practitioner_role(id="role-1", display="Dr. Jane Smith")])
    service = create_service(store, directory_api)
    nested = []

    def search_and_trigger_again(page_size: int) -> List[Dict[str, Any]]:
        nested.append(service.enrich())
        return [mock_data.directory_practitioner(npi="1999999999")]

    directory_api.search_practitioners.side_effect = search_and_trigger_again

    report = service.enrich()

    assert report.status == "success"
    assert report.matched == 1
    assert len(nested) == 1
    assert nested[0].status == "skipped"
    assert nested[0].reason == "already_running"
    assert directory_api.search_practitioners.call_count == 1

    assert service.enrich().status == "success"
