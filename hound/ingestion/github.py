"""GitHub source implementation."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from hound.core.config import GitHubSettings
from hound.core.logging import get_logger
from hound.schemas.events import Event, RepositoryEvent
from hound.schemas.stats import StatItem
from .base import BaseSource, FetchOperation

log = get_logger("ingestion.github")


class GitHubSource(BaseSource):
    """Fetches public activity and repositories of a GitHub user."""

    name = "github"

    def __init__(
        self,
        config: GitHubSettings,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.config = config

    def operations(self) -> List[FetchOperation]:
        return [FetchOperation(self.name, "user_events", self.user_events)]

    def stats_operation(self) -> FetchOperation:
        return FetchOperation(self.name, "user_repos", self.user_repos)

    @property
    def _base_url(self) -> str:
        return self.config.base_url.rstrip("/")

    async def user_events(self) -> List[Event]:
        data = await self.get_json(
            "user_events",
            f"{self._base_url}/users/{self.config.user}/events",
            headers=self.headers(self.config.token),
        )

        results: List[Event] = []
        for item in data:
            ts = self.parse_timestamp(item.get("created_at"))
            if not ts:
                continue
            try:
                payload = RepositoryEvent(
                    type=item.get("type") or "Event",
                    actor=(item.get("actor") or {}).get("login") or self.config.user,
                    repo=(item.get("repo") or {}).get("name") or "",
                    created_at=ts,
                    payload=item.get("payload") or {},
                )
                event = Event(source=self.name, timestamp=ts, payload=payload)
            except (AttributeError, ValidationError) as exc:
                log.warning(f"Skipping malformed GitHub event {item.get('id')}: {exc}")
                continue
            results.append(event)
        log.info(f"Fetched {len(results)} events from GitHub for {self.config.user}")
        return results

    async def user_repos(self) -> List[StatItem]:
        data: List[Dict[str, Any]] = await self.get_json(
            "user_repos",
            f"{self._base_url}/users/{self.config.user}/repos",
            headers=self.headers(self.config.token),
        )
        items = [
            StatItem(name=repo.get("name") or "", description=repo.get("description") or "")
            for repo in data
        ]
        log.info(f"Fetched {len(items)} repositories from GitHub")
        return items
