"""Tests for the batch scheduler: partitioning, concurrency bound and failure isolation."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from company_enrichment.models import MergedCompany
from company_enrichment.scheduler import BatchScheduler, SchedulerState, partition


class TestPartition:
    def test_consecutive_slices(self):
        assert partition(list(range(7)), 3) == [[0, 1, 2], [3, 4, 5], [6]]

    def test_empty(self):
        assert partition([], 3) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            partition([1], 0)


class TestBatchScheduler:
    """Test suite for BatchScheduler.run()."""

    @pytest.mark.asyncio
    async def test_every_domain_enriched(self):
        scheduler = BatchScheduler(batch_size=3, batch_concurrency=2, chunk_size=2)
        domains = [f"company{i}.com" for i in range(10)]

        async def enrich(domain, context):
            return MergedCompany(domain=domain)

        result = await scheduler.run(domains, enrich)

        assert set(result.companies) == set(domains)
        assert result.failures == {}
        assert len(result) == 10
        assert scheduler.state is SchedulerState.COMPLETE

    @pytest.mark.asyncio
    async def test_concurrency_bound(self):
        """Test that in-flight enrichments never exceed batch_concurrency * chunk_size."""
        scheduler = BatchScheduler(batch_size=4, batch_concurrency=2, chunk_size=2)
        in_flight = 0
        peak = 0

        async def enrich(domain, context):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.005)
            in_flight -= 1
            return MergedCompany(domain=domain)

        result = await scheduler.run([f"c{i}.com" for i in range(25)], enrich)

        assert len(result.companies) == 25
        assert 1 < peak <= 4

    @pytest.mark.asyncio
    async def test_prepare_batch_runs_once_per_batch(self):
        scheduler = BatchScheduler(batch_size=3, batch_concurrency=2, chunk_size=3)
        prepare = AsyncMock(side_effect=lambda batch: f"context:{batch[0]}")
        seen_contexts = {}

        async def enrich(domain, context):
            seen_contexts[domain] = context
            return MergedCompany(domain=domain)

        domains = ["a.com", "b.com", "c.com", "d.com"]
        await scheduler.run(domains, enrich, prepare_batch=prepare)

        assert [call.args[0] for call in prepare.await_args_list] == [
            ["a.com", "b.com", "c.com"],
            ["d.com"],
        ]
        assert seen_contexts["b.com"] == "context:a.com"
        assert seen_contexts["d.com"] == "context:d.com"

    @pytest.mark.asyncio
    async def test_domain_failure_is_isolated(self):
        """Test that one failing domain does not affect its siblings."""
        scheduler = BatchScheduler(batch_size=4, batch_concurrency=1, chunk_size=4)

        async def enrich(domain, context):
            if domain == "broken.com":
                raise RuntimeError("search index exploded")
            return MergedCompany(domain=domain)

        result = await scheduler.run(["a.com", "broken.com", "c.com"], enrich)

        assert set(result.companies) == {"a.com", "c.com"}
        assert result.failures["broken.com"].error == "search index exploded"

    @pytest.mark.asyncio
    async def test_batch_level_failure_aborts_run(self):
        """Test that a prepare_batch failure propagates and stops further waves."""
        scheduler = BatchScheduler(batch_size=2, batch_concurrency=1, chunk_size=2)
        error = RuntimeError("metadata provider down")
        prepare = AsyncMock(side_effect=[None, error, None])
        enrich = AsyncMock(side_effect=lambda domain, context: MergedCompany(domain=domain))

        with pytest.raises(RuntimeError) as exc_info:
            await scheduler.run(
                ["a.com", "b.com", "c.com", "d.com", "e.com"],
                enrich,
                prepare_batch=prepare,
            )

        assert exc_info.value is error
        assert prepare.await_count == 2
        assert {call.args[0] for call in enrich.await_args_list} == {"a.com", "b.com"}

    @pytest.mark.asyncio
    async def test_empty_input(self):
        scheduler = BatchScheduler()

        result = await scheduler.run([], AsyncMock())

        assert len(result) == 0
        assert scheduler.state is SchedulerState.COMPLETE

    def test_from_settings(self, settings):
        scheduler = BatchScheduler.from_settings(settings)

        assert scheduler.batch_size == settings.batch_size
        assert scheduler.batch_concurrency == settings.batch_concurrency
        assert scheduler.chunk_size == settings.chunk_size

    def test_invalid_sizes(self):
        with pytest.raises(ValueError):
            BatchScheduler(batch_size=0)
