"""Builds the source activation set from resolved settings."""

from __future__ import annotations

from typing import List, Optional

import httpx

from hound.core.config import Settings
from hound.ingestion.base import BaseSource, FetchOperation
from hound.ingestion.github import GitHubSource
from hound.ingestion.gitlab import GitLabSource
from hound.ingestion.jira import JiraSource


def build_sources(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> List[BaseSource]:
    """Instantiate a source for every active provider section."""
    timeout = settings.HTTP_TIMEOUT_SECONDS
    sources: List[BaseSource] = []
    if settings.GITLAB.active:
        sources.append(GitLabSource(settings.GITLAB, timeout=timeout, transport=transport))
    if settings.GITHUB.active:
        sources.append(GitHubSource(settings.GITHUB, timeout=timeout, transport=transport))
    if settings.JIRA.active:
        sources.append(JiraSource(settings.JIRA, timeout=timeout, transport=transport))
    return sources


def history_operations(sources: List[BaseSource]) -> List[FetchOperation]:
    return [op for source in sources for op in source.operations()]


def stats_operations(sources: List[BaseSource]) -> List[FetchOperation]:
    return [source.stats_operation() for source in sources]
