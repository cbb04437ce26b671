from typing import cast

import inject

from app.config import get_config
from app.db.db import Database
from app.services.api.practitioner_directory_api import PractitionerDirectoryApi
from app.services.booking_service import BookingService
from app.services.bulk.republish_service import RepublishService
from app.services.enrichment.enrichment_service import EnrichmentService
from app.services.enrichment.name_matcher import NameMatcher, TokenOverlapNameMatcher
from app.services.scheduler import Scheduler
from app.services.search.query_engine import QueryEngine
from app.services.store.provider import ResourceStoreProvider
from app.services.store.resource_store import ResourceStore
from app.services.sync.mass_sync_service import MassSyncService
from app.services.sync.publisher_sync_service import PublisherSyncService
from app.stats import get_stats


def container_config(binder: inject.Binder) -> None:
    config = get_config()

    store_provider = ResourceStoreProvider(
        storage_config=config.storage,
        database_config=config.database,
    )
    resource_store = store_provider.create()
    binder.bind(ResourceStore, resource_store)
    binder.bind(ResourceStoreProvider, store_provider)

    publisher_sync_service = PublisherSyncService(
        resource_store=resource_store,
        timeout=config.publishers.timeout,
        retries=config.publishers.retries,
        backoff=config.publishers.backoff,
    )
    binder.bind(PublisherSyncService, publisher_sync_service)

    name_matcher = TokenOverlapNameMatcher(threshold=config.enrichment.match_threshold)
    binder.bind(NameMatcher, name_matcher)

    enrichment_service = EnrichmentService(
        resource_store=resource_store,
        directory_api=PractitionerDirectoryApi(
            base_url=config.enrichment.directory_url,
            timeout=config.enrichment.timeout,
            retries=config.publishers.retries,
            backoff=config.publishers.backoff,
        ),
        name_matcher=name_matcher,
        page_size=config.enrichment.page_size,
        enabled=config.enrichment.enabled,
        demo_mode=config.enrichment.demo_mode,
    )
    binder.bind(EnrichmentService, enrichment_service)

    mass_sync_service = MassSyncService(
        publisher_sync_service=publisher_sync_service,
        publisher_urls=config.publishers.urls,
        stats=get_stats(),
        enrichment_service=enrichment_service,
        max_concurrent_publisher_syncs=config.scheduler.max_concurrent_publisher_syncs,
    )
    binder.bind(MassSyncService, mass_sync_service)

    binder.bind(QueryEngine, QueryEngine(resource_store))
    binder.bind(RepublishService, RepublishService(resource_store))
    binder.bind(BookingService, BookingService(resource_store))

    sync_scheduler = Scheduler(
        function=mass_sync_service.sync_all,
        delay=config.scheduler.delay_input_in_sec,  # type: ignore
        max_logs_entries=config.scheduler.max_logs_entries,
        name="sync_scheduler",
    )
    binder.bind("sync_scheduler", sync_scheduler)


def get_scheduler() -> Scheduler:
    return cast(Scheduler, inject.instance("sync_scheduler"))


def get_resource_store() -> ResourceStore:
    return inject.instance(ResourceStore)  # type: ignore[type-abstract]


def get_database() -> Database | None:
    return inject.instance(ResourceStoreProvider).database


def get_mass_sync_service() -> MassSyncService:
    return inject.instance(MassSyncService)


def get_enrichment_service() -> EnrichmentService:
    return inject.instance(EnrichmentService)


def get_query_engine() -> QueryEngine:
    return inject.instance(QueryEngine)


def get_republish_service() -> RepublishService:
    return inject.instance(RepublishService)


def get_booking_service() -> BookingService:
    return inject.instance(BookingService)


def setup_container() -> None:
    inject.configure(container_config, once=True)
