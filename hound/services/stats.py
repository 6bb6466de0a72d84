"""Per-provider listing of owned repositories, projects and issues."""

from __future__ import annotations

from typing import List, Optional, Sequence

from hound.core.logging import get_logger
from hound.ingestion.base import FetchOperation
from hound.ingestion.runner import IngestionRunner
from hound.schemas.stats import Stat

log = get_logger("services.stats")

DISPLAY_NAMES = {"github": "GitHub", "gitlab": "GitLab", "jira": "Jira"}


class StatsService:
    """Collects one Stat per provider concurrently; failed providers come back empty."""

    def __init__(
        self,
        operations: Sequence[FetchOperation],
        fetch_timeout: Optional[float] = None,
        aggregation_timeout: Optional[float] = None,
    ):
        self.operations = list(operations)
        self.fetch_timeout = fetch_timeout
        self.aggregation_timeout = aggregation_timeout

    @staticmethod
    def _as_stat(operation: FetchOperation) -> FetchOperation:
        async def fetch() -> List[Stat]:
            items = await operation.fetch()
            return [Stat(name=DISPLAY_NAMES.get(operation.source, operation.source), items=items)]

        return FetchOperation(operation.source, operation.name, fetch)

    async def collect(self) -> List[Stat]:
        runner = IngestionRunner(
            [self._as_stat(op) for op in self.operations],
            fetch_timeout=self.fetch_timeout,
            aggregation_timeout=self.aggregation_timeout,
        )
        result = await runner.run()
        collected = {stat.name: stat for batch in result.batches for stat in batch}

        stats: List[Stat] = []
        for op in self.operations:
            name = DISPLAY_NAMES.get(op.source, op.source)
            stats.append(collected.get(name) or Stat(name=name, items=[]))
        log.info(f"Collected stats for {len(stats)} providers")
        return stats
