# Services package
from hound.services.render import Renderer, describe
from hound.services.sources import build_sources, history_operations, stats_operations
from hound.services.stats import StatsService
from hound.services.timeline import (
    DayHeader,
    Timeline,
    TimelineService,
    merge_batches,
    partition_days,
    render_timeline,
)

__all__ = [
    "Renderer",
    "describe",
    "build_sources",
    "history_operations",
    "stats_operations",
    "StatsService",
    "DayHeader",
    "Timeline",
    "TimelineService",
    "merge_batches",
    "partition_days",
    "render_timeline",
]
