"""
Batch scheduler.

Partitions the unique domains of a run into fixed-size batches and dispatches
them in waves of at most ``batch_concurrency`` batches. Inside a batch the
domains are enriched chunk by chunk, each chunk concurrently, which caps the
per-domain fan-out at ``batch_concurrency * chunk_size`` rather than the size
of the submission.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from .config import EnrichmentSettings
from .models import DomainFailure, MergedCompany

logger = logging.getLogger(__name__)

T = TypeVar("T")

PrepareBatch = Callable[[list[str]], Awaitable[Any]]
EnrichDomain = Callable[[str, Any], Awaitable[MergedCompany]]


class SchedulerState(str, Enum):
    """Lifecycle of one scheduler run."""

    IDLE = "idle"
    PARTITIONING = "partitioning"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    COMPLETE = "complete"


@dataclass(slots=True)
class ScheduleResult:
    """Outcome of every scheduled domain: a merged company or a failure."""

    companies: dict[str, MergedCompany] = field(default_factory=dict)
    failures: dict[str, DomainFailure] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.companies) + len(self.failures)


class ResultCollector:
    """Lock-guarded accumulator shared by the concurrent chunk workers."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._result = ScheduleResult()

    async def add_company(self, domain: str, company: MergedCompany) -> None:
        async with self._lock:
            self._result.companies[domain] = company

    async def add_failure(self, failure: DomainFailure) -> None:
        async with self._lock:
            self._result.failures[failure.domain] = failure

    def result(self) -> ScheduleResult:
        return self._result


def partition(items: Sequence[T], size: int) -> list[list[T]]:
    """Split ``items`` into consecutive lists of at most ``size`` elements."""
    if size < 1:
        raise ValueError("partition size must be >= 1")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BatchScheduler:
    """
    Drives batched, bounded-concurrency enrichment of a list of domains.

    A failure inside ``enrich_domain`` is contained to that domain and recorded
    as a DomainFailure. A failure inside ``prepare_batch`` (batch-level provider
    calls) is a run-level failure: in-flight batches are cancelled and the
    exception propagates.
    """

    def __init__(
        self, batch_size: int = 80, batch_concurrency: int = 3, chunk_size: int = 20
    ):
        if batch_size < 1 or batch_concurrency < 1 or chunk_size < 1:
            raise ValueError("batch_size, batch_concurrency and chunk_size must be >= 1")
        self.batch_size = batch_size
        self.batch_concurrency = batch_concurrency
        self.chunk_size = chunk_size
        self._state = SchedulerState.IDLE

    @classmethod
    def from_settings(cls, settings: EnrichmentSettings) -> "BatchScheduler":
        return cls(
            batch_size=settings.batch_size,
            batch_concurrency=settings.batch_concurrency,
            chunk_size=settings.chunk_size,
        )

    @property
    def state(self) -> SchedulerState:
        return self._state

    def _transition(self, state: SchedulerState) -> None:
        logger.debug(f"Scheduler {self._state.value} -> {state.value}")
        self._state = state

    async def run(
        self,
        domains: Sequence[str],
        enrich_domain: EnrichDomain,
        prepare_batch: PrepareBatch | None = None,
    ) -> ScheduleResult:
        """
        Enrich every domain and collect one outcome per domain.

        Parameters:
            domains (Sequence[str]): Unique canonical domains, in input order.
            enrich_domain (EnrichDomain): Coroutine ``(domain, batch_context)`` returning
                the merged company for one domain.
            prepare_batch (PrepareBatch | None): Coroutine run once per batch before
                its domains; its return value is passed to ``enrich_domain`` as
                ``batch_context``.

        Returns:
            ScheduleResult: Merged companies and per-domain failures.
        """
        start_time = time.time()
        self._transition(SchedulerState.PARTITIONING)
        batches = partition(domains, self.batch_size)
        waves = partition(batches, self.batch_concurrency)
        logger.info(
            f"Scheduling {len(domains)} domains in {len(batches)} batches "
            f"({len(waves)} waves, chunk size {self.chunk_size})"
        )

        collector = ResultCollector()
        batch_number = 0
        for wave in waves:
            self._transition(SchedulerState.DISPATCHING)
            tasks = []
            for batch in wave:
                batch_number += 1
                tasks.append(
                    asyncio.create_task(
                        self._run_batch(
                            batch, batch_number, enrich_domain, prepare_batch, collector
                        )
                    )
                )

            self._transition(SchedulerState.DRAINING)
            try:
                await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        self._transition(SchedulerState.COMPLETE)
        result = collector.result()
        logger.info(
            f"Scheduler complete in {time.time() - start_time:.2f}s: "
            f"{len(result.companies)} enriched, {len(result.failures)} failed"
        )
        return result

    async def _run_batch(
        self,
        batch: list[str],
        batch_number: int,
        enrich_domain: EnrichDomain,
        prepare_batch: PrepareBatch | None,
        collector: ResultCollector,
    ) -> None:
        logger.info(f"Batch {batch_number}: {len(batch)} domains")
        context = await prepare_batch(batch) if prepare_batch is not None else None

        for chunk in partition(batch, self.chunk_size):
            await asyncio.gather(
                *(
                    self._run_domain(domain, context, enrich_domain, collector)
                    for domain in chunk
                )
            )

    @staticmethod
    async def _run_domain(
        domain: str,
        context: Any,
        enrich_domain: EnrichDomain,
        collector: ResultCollector,
    ) -> None:
        try:
            company = await enrich_domain(domain, context)
        except Exception as e:
            logger.exception(f"Enrichment failed for {domain}: {e}")
            await collector.add_failure(
                DomainFailure(domain=domain, error=str(e) or type(e).__name__)
            )
        else:
            await collector.add_company(domain, company)
