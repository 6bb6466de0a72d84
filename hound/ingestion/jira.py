"""Jira source implementation."""

from __future__ import annotations

from typing import List, Optional

import httpx
from pydantic import ValidationError

from hound.core.config import JiraSettings
from hound.core.logging import get_logger
from hound.schemas.events import ActivityItem, Event, Issue
from hound.schemas.stats import StatItem
from .base import BaseSource, FetchOperation

log = get_logger("ingestion.jira")

STATS_MAX_RESULTS = 1000


class JiraSource(BaseSource):
    """Fetches assigned issues and the activity stream of a Jira user."""

    name = "jira"

    def __init__(
        self,
        config: JiraSettings,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.config = config

    def operations(self) -> List[FetchOperation]:
        return [
            FetchOperation(self.name, "assigned_issues", self.assigned_issues),
            FetchOperation(self.name, "user_activity", self.user_activity),
        ]

    def stats_operation(self) -> FetchOperation:
        return FetchOperation(self.name, "assigned_issues", self.assigned_items)

    def _url(self, path: str) -> str:
        return self.config.base_url.rstrip("/") + "/" + path.strip("/")

    async def _search(self, max_results: int, start_at: int = 0) -> List[dict]:
        data = await self.get_json(
            "assigned_issues",
            self._url(f"{self.config.api_path}/search"),
            params={
                "jql": f'assignee = "{self.config.user}"',
                "maxResults": max_results,
                "startAt": start_at,
            },
        )
        return data.get("issues") or []

    async def assigned_issues(self) -> List[Event]:
        results: List[Event] = []
        for item in await self._search(self.config.max_results):
            fields = item.get("fields") or {}
            ts = self.parse_timestamp(fields.get("created"))
            if not ts:
                continue
            try:
                payload = Issue(
                    key=item.get("key") or "",
                    summary=fields.get("summary") or "",
                    created_at=ts,
                    status=(fields.get("status") or {}).get("name"),
                )
                event = Event(source=self.name, timestamp=ts, payload=payload)
            except (AttributeError, ValidationError) as exc:
                log.warning(f"Skipping malformed Jira issue {item.get('key')}: {exc}")
                continue
            results.append(event)
        log.info(f"Fetched {len(results)} issues assigned to {self.config.user}")
        return results

    async def user_activity(self) -> List[Event]:
        entries = await self.get_feed(
            "user_activity",
            self._url(self.config.activity_path),
            params={"streams": f"user IS {self.config.activity_user}"},
        )

        results: List[Event] = []
        for entry in entries:
            ts = self.parse_timestamp(self.entry_text(entry, "atom:updated"))
            if not ts:
                continue
            try:
                payload = ActivityItem(
                    title=self.entry_text(entry, "atom:title") or "",
                    updated=ts,
                    author=self.entry_text(entry, "atom:author/atom:name"),
                )
                event = Event(source=self.name, timestamp=ts, payload=payload)
            except ValidationError as exc:
                log.warning(f"Skipping malformed Jira activity entry: {exc}")
                continue
            results.append(event)
        log.info(f"Fetched {len(results)} activity entries for {self.config.activity_user}")
        return results

    async def assigned_items(self) -> List[StatItem]:
        issues = await self._search(STATS_MAX_RESULTS)
        return [
            StatItem(name=item.get("key") or "", description=(item.get("fields") or {}).get("summary") or "")
            for item in issues
        ]
