"""Failure handling and concurrent collection tests"""

import asyncio
import time
from datetime import datetime, timedelta, timezone

import pytest

from hound.core.errors import AggregationTimeoutError
from hound.ingestion.base import FetchOperation
from hound.ingestion.runner import IngestionRunner
from hound.schemas.events import Event, Issue
from hound.services.timeline import TimelineService

BASE = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)


def make_events(source_key, count):
    return [
        Event(
            source="jira",
            timestamp=BASE + timedelta(minutes=i),
            payload=Issue(key=f"{source_key}-{i}", summary="s", created_at=BASE + timedelta(minutes=i)),
        )
        for i in range(count)
    ]


def operation(name, events=None, delay=0.0, error=None):
    async def fetch():
        if delay:
            await asyncio.sleep(delay)
        if error:
            raise error
        return events or []

    return FetchOperation("jira", name, fetch)


class TestFailureHandling:
    """Test failure handling and recovery"""

    @pytest.mark.asyncio
    async def test_failing_source_yields_empty_batch(self):
        """Test a failing fetch contributes an empty batch"""
        runner = IngestionRunner([
            operation("a", make_events("A", 2)),
            operation("b", error=RuntimeError("Simulated fetch failure")),
            operation("c", make_events("C", 3)),
        ])
        result = await runner.run()
        assert result.complete
        assert [len(batch) for batch in result.batches] == [2, 0, 3]

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_other_sources(self):
        """Test other sources survive one source failure"""
        service = TimelineService(
            [
                operation("a", make_events("A", 2)),
                operation("b", error=ConnectionError("down")),
                operation("c", make_events("C", 3), delay=0.05),
            ],
            aggregation_timeout=5.0,
        )
        started = time.monotonic()
        timeline = await service.build()
        assert time.monotonic() - started < 5.0
        assert len(timeline.events) == 5
        assert {event.payload.key[0] for event in timeline.events} == {"A", "C"}
        assert timeline.complete

    @pytest.mark.asyncio
    async def test_fetch_timeout_degrades_to_empty_batch(self):
        """Test a slow fetch is cut off by the fetch timeout"""
        runner = IngestionRunner(
            [operation("slow", make_events("S", 1), delay=10), operation("fast", make_events("F", 1))],
            fetch_timeout=0.05,
        )
        result = await runner.run()
        assert result.complete
        assert [len(batch) for batch in result.batches] == [0, 1]

    @pytest.mark.asyncio
    async def test_aggregation_deadline_returns_partial_result(self):
        """Test the aggregation deadline returns the batches received so far"""
        runner = IngestionRunner(
            [operation("stuck", make_events("S", 1), delay=10), operation("fast", make_events("F", 2))],
            aggregation_timeout=0.1,
        )
        result = await runner.run()
        assert not result.complete
        assert (result.received, result.expected) == (1, 2)
        assert [len(batch) for batch in result.batches] == [2]
        with pytest.raises(AggregationTimeoutError, match="1/2 sources reported"):
            result.raise_for_incomplete()


class TestConcurrentCollection:
    """Every operation reports exactly one batch"""

    @pytest.mark.asyncio
    async def test_delayed_operations_still_counted(self):
        """Test delayed operations still deliver one batch each"""
        ops = [operation(f"op{i}", make_events(f"K{i}", 1), delay=0.05 if i % 2 else 0) for i in range(6)]
        result = await IngestionRunner(ops).run()
        assert result.received == 6
        assert all(len(batch) == 1 for batch in result.batches)

    @pytest.mark.asyncio
    async def test_operations_run_concurrently(self):
        """Test operations run concurrently, not one after another"""
        ops = [operation(f"op{i}", delay=0.2) for i in range(5)]
        started = time.monotonic()
        result = await IngestionRunner(ops).run()
        assert time.monotonic() - started < 0.9
        assert result.received == 5

    @pytest.mark.asyncio
    async def test_batches_follow_activation_order(self):
        """Test batches come back in activation order"""
        ops = [
            operation("late", make_events("L", 1), delay=0.1),
            operation("early", make_events("E", 1)),
        ]
        result = await IngestionRunner(ops).run()
        assert [batch[0].payload.key for batch in result.batches] == ["L-0", "E-0"]

    @pytest.mark.asyncio
    async def test_no_operations(self):
        """Test an empty activation set completes immediately"""
        result = await IngestionRunner([]).run()
        assert result.batches == []
        assert result.complete

    @pytest.mark.asyncio
    async def test_repeated_runs_are_independent(self):
        """Test a runner can be run twice with the same outcome"""
        runner = IngestionRunner([operation("a", make_events("A", 1))])
        first = await runner.run()
        second = await runner.run()
        assert first.batches == second.batches
