import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List

from app.models.sync.dto import PublisherSyncResult, SyncCycleReport
from app.services.enrichment.enrichment_service import EnrichmentService
from app.services.sync.publisher_sync_service import PublisherSyncService
from app.stats import Stats

logger = logging.getLogger(__name__)


class MassSyncService:
    def __init__(
        self,
        publisher_sync_service: PublisherSyncService,
        publisher_urls: List[str],
        stats: Stats,
        enrichment_service: EnrichmentService | None = None,
        max_concurrent_publisher_syncs: int = 1,
    ) -> None:
        self.__publisher_sync_service = publisher_sync_service
        self.__publisher_urls = publisher_urls
        self.__stats = stats
        self.__enrichment_service = enrichment_service
        self.__max_concurrent_publisher_syncs = max(1, max_concurrent_publisher_syncs)
        self.__lock = threading.Lock()

    @property
    def publisher_urls(self) -> List[str]:
        return list(self.__publisher_urls)

    def is_running(self) -> bool:
        return self.__lock.locked()

    def sync_all(self) -> SyncCycleReport:
        """
        Runs one sync cycle over every configured publisher followed by an enrichment pass. A trigger
        that arrives while a cycle is in flight is skipped.
        """
        if not self.__lock.acquire(blocking=False):
            logger.info("Sync cycle already running, skipping this trigger")
            return SyncCycleReport(status="skipped", reason="already_running")

        try:
            return self.__run_cycle()
        finally:
            self.__lock.release()

    def __run_cycle(self) -> SyncCycleReport:
        start = time.monotonic()
        logger.info("Starting sync of %s publishers: %s", len(self.__publisher_urls), self.__publisher_urls)

        with self.__stats.timer("sync_all_publishers"):
            results = self.__sync_publishers()

        succeeded = len([r for r in results if r.status == "success"])
        failed = len(results) - succeeded
        self.__stats.inc("sync.publishers.succeeded", succeeded)
        self.__stats.inc("sync.publishers.failed", failed)
        logger.info("Sync cycle finished: %s succeeded, %s failed", succeeded, failed)

        enrichment = None
        if self.__enrichment_service is not None:
            enrichment = self.__enrichment_service.enrich().model_dump()

        return SyncCycleReport(
            status="success",
            succeeded=succeeded,
            failed=failed,
            publishers=results,
            enrichment=enrichment,
            time=round(time.monotonic() - start, 3),
        )

    def __sync_publishers(self) -> List[PublisherSyncResult]:
        if self.__max_concurrent_publisher_syncs <= 1:
            return [self.__sync_one(url) for url in self.__publisher_urls]

        # Completion order differs from configuration order, so results are re-sorted afterwards
        results: dict[int, PublisherSyncResult] = {}
        with ThreadPoolExecutor(max_workers=self.__max_concurrent_publisher_syncs) as executor:
            future_map = {
                executor.submit(self.__sync_one, url): index
                for index, url in enumerate(self.__publisher_urls)
            }
            for future in as_completed(future_map):
                results[future_map[future]] = future.result()

        return [results[i] for i in range(len(self.__publisher_urls))]

    def __sync_one(self, publisher_url: str) -> PublisherSyncResult:
        try:
            return self.__publisher_sync_service.sync(publisher_url)
        except Exception as e:
            logger.exception("Failed to sync publisher %s", publisher_url)
            return PublisherSyncResult(publisher_url=publisher_url, status="error", error=str(e))
