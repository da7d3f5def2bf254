"""
Batch upgrades with bounded concurrency.

Provides:
- A fixed pool of worker tasks draining a shared queue of documents
- Fail-fast: no new document starts once one upgrade has failed
- Aggregation of per-document outcomes into a BatchResult
"""

import asyncio
import inspect
import time
from collections.abc import Callable, Iterable
from typing import Any

from migrate_nosql.core import metrics
from migrate_nosql.core.exceptions import FetchError
from migrate_nosql.log.logging import logger
from migrate_nosql.migrations.chain import ChainExecutor
from migrate_nosql.migrations.models import BatchResult, FetchedDocument, UpgradeOutcome

Fetcher = Callable[[], Iterable[Any]]


class BatchOrchestrator:
    """
    Runs the migration chain over many documents, at most ``parallel_limit``
    at a time.
    """

    def __init__(self, chain: ChainExecutor, parallel_limit: int = 8):
        if parallel_limit < 1:
            raise ValueError("parallel_limit must be positive")
        self._chain = chain
        self._parallel_limit = parallel_limit

    @property
    def parallel_limit(self) -> int:
        return self._parallel_limit

    async def _fetch(self, fetch: Fetcher) -> list[FetchedDocument]:
        try:
            fetched = fetch()
            if inspect.isawaitable(fetched):
                fetched = await fetched
            return [FetchedDocument.from_dict(item) for item in fetched]
        except Exception as e:
            logger.error(
                "Batch fetch failed: {error}",
                error=str(e),
                event_type="batch_fetch_failed",
            )
            raise FetchError(str(e)) from e

    async def run_batch(self, fetch: Fetcher) -> BatchResult:
        """
        Fetch documents and upgrade each of them.

        Args:
            fetch: Sync or async callable returning ``{"id", "doc"}`` pairs.

        Returns:
            BatchResult with handled, upgraded and total step counts.

        Raises:
            FetchError: If the fetcher fails. Nothing is upgraded.
            MigrationError: If an upgrade fails. Upgrades already running are
                allowed to finish and no summary is returned.
            PersistenceError: If saving a migrated document fails.
        """
        items = await self._fetch(fetch)
        start_time = time.time()

        queue: asyncio.Queue[FetchedDocument] = asyncio.Queue()
        for item in items:
            queue.put_nowait(item)

        outcomes: list[UpgradeOutcome] = []
        failures: list[Exception] = []

        async def worker() -> None:
            while not failures:
                try:
                    item = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                try:
                    outcome = await self._chain.upgrade(item.doc, item.id)
                except Exception as e:
                    failures.append(e)
                    return
                outcomes.append(outcome)

        worker_count = min(self._parallel_limit, len(items))
        await asyncio.gather(*(worker() for _ in range(worker_count)))

        duration = time.time() - start_time
        if failures:
            metrics.record_batch_duration(duration, "failed")
            logger.error(
                "Batch aborted after {handled} of {count} documents: {error}",
                handled=len(outcomes),
                count=len(items),
                upgraded=sum(1 for o in outcomes if o.upgraded),
                error=str(failures[0]),
                event_type="batch_failed",
            )
            raise failures[0]

        result = BatchResult.from_outcomes(outcomes, duration_ms=int(duration * 1000))
        metrics.record_batch_duration(duration, "success")
        logger.info(
            "Batch completed: {handled} handled, {upgraded} upgraded, {total} steps",
            event_type="batch_completed",
            **result.to_dict(),
        )
        return result
