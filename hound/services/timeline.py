"""History timeline: dispatch, merge, day partitioning and rendering."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from hound.core.logging import get_logger
from hound.ingestion.base import FetchOperation
from hound.ingestion.runner import DispatchResult, IngestionRunner
from hound.schemas.events import Event
from hound.services.render import Renderer

log = get_logger("services.timeline")

TODAY = "Today"
DAY_FORMAT = "%A %d %B"


@dataclass(frozen=True)
class DayHeader:
    label: str
    day: date


def merge_batches(batches: Iterable[Sequence[Event]]) -> List[Event]:
    """Flatten batches into one list, most recent first.

    The sort is stable, so events sharing a timestamp keep the order in
    which their batches were concatenated.
    """
    events = [event for batch in batches for event in batch]
    return sorted(events, key=lambda event: event.timestamp, reverse=True)


def local_day(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    return moment.astimezone(tz).date()


def day_label(day: date, today: date) -> str:
    if day == today:
        return TODAY
    return day.strftime(DAY_FORMAT)


def partition_days(
    events: Iterable[Event], now: datetime, tz: Optional[tzinfo] = None
) -> Iterator[Union[DayHeader, Event]]:
    """Yield events in order, preceded by a DayHeader whenever the local date changes."""
    today = local_day(now, tz)
    current: Optional[date] = None
    for event in events:
        day = local_day(event.timestamp, tz)
        if day != current:
            yield DayHeader(label=day_label(day, today), day=day)
            current = day
        yield event


def render_timeline(
    events: Iterable[Event], renderer: Renderer, now: datetime, tz: Optional[tzinfo] = None
) -> Iterator[str]:
    for item in partition_days(events, now, tz):
        if isinstance(item, DayHeader):
            yield renderer.day_header(item.label)
        else:
            yield renderer.event(item)


@dataclass(frozen=True)
class Timeline:
    """Outcome of one aggregation run."""

    events: List[Event]
    received: int
    expected: int

    @property
    def complete(self) -> bool:
        return self.received == self.expected


class TimelineService:
    """Runs one aggregation over an already resolved set of fetch operations."""

    def __init__(
        self,
        operations: Sequence[FetchOperation],
        fetch_timeout: Optional[float] = None,
        aggregation_timeout: Optional[float] = None,
    ):
        self.runner = IngestionRunner(
            operations, fetch_timeout=fetch_timeout, aggregation_timeout=aggregation_timeout
        )

    async def collect(self) -> DispatchResult:
        return await self.runner.run()

    async def build(self) -> Timeline:
        result = await self.collect()
        events = merge_batches(result.batches)
        log.info(f"Merged {len(events)} events from {result.received}/{result.expected} operations")
        return Timeline(events=events, received=result.received, expected=result.expected)
