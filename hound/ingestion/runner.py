"""Concurrent fan-out/fan-in over source fetch operations."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from hound.core.errors import AggregationTimeoutError
from hound.core.logging import get_logger
from .base import FetchOperation

log = get_logger("ingestion.runner")


@dataclass(frozen=True)
class DispatchResult:
    """Batches collected in one run, in activation order.

    When the aggregation deadline expires, ``batches`` only holds the batches
    that arrived in time and ``complete`` is False.
    """

    batches: List[List[Any]]
    expected: int

    @property
    def received(self) -> int:
        return len(self.batches)

    @property
    def complete(self) -> bool:
        return self.received == self.expected

    def raise_for_incomplete(self) -> None:
        if not self.complete:
            raise AggregationTimeoutError(self.received, self.expected)


class IngestionRunner:
    """Runs every fetch operation concurrently and collects one batch per operation.

    Failing or slow operations degrade to an empty batch; they never keep the
    other operations from being collected.
    """

    def __init__(
        self,
        operations: Sequence[FetchOperation],
        fetch_timeout: Optional[float] = None,
        aggregation_timeout: Optional[float] = None,
    ):
        self.operations = list(operations)
        self.fetch_timeout = fetch_timeout
        self.aggregation_timeout = aggregation_timeout

    async def run(self) -> DispatchResult:
        expected = len(self.operations)
        queue: asyncio.Queue[Tuple[int, List[Any]]] = asyncio.Queue()
        tasks = [
            asyncio.create_task(self._collect(index, op, queue), name=op.label)
            for index, op in enumerate(self.operations)
        ]

        loop = asyncio.get_running_loop()
        deadline = None if self.aggregation_timeout is None else loop.time() + self.aggregation_timeout
        arrived: List[Tuple[int, List[Any]]] = []
        try:
            while len(arrived) < expected:
                remaining = None if deadline is None else deadline - loop.time()
                arrived.append(await asyncio.wait_for(queue.get(), remaining))
        except asyncio.TimeoutError:
            log.warning(
                f"Aggregation deadline of {self.aggregation_timeout}s reached, "
                f"{len(arrived)}/{expected} operations reported"
            )
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        arrived.sort(key=lambda item: item[0])
        return DispatchResult(batches=[batch for _, batch in arrived], expected=expected)

    async def _collect(
        self, index: int, operation: FetchOperation, queue: asyncio.Queue[Tuple[int, List[Any]]]
    ) -> None:
        batch: List[Any] = []
        try:
            batch = list(await asyncio.wait_for(operation.fetch(), self.fetch_timeout))
        except asyncio.TimeoutError:
            log.warning(f"Source={operation.label} timed out after {self.fetch_timeout}s")
        except Exception as exc:  # noqa: BLE001
            log.warning(f"Source={operation.label} failed: {exc}")
        else:
            log.info(f"Source={operation.label} fetched={len(batch)}")
        queue.put_nowait((index, batch))
