"""GitLab source implementation."""

from __future__ import annotations

from typing import Dict, List, Optional

import httpx
from pydantic import ValidationError

from hound.core.config import GitLabSettings
from hound.core.logging import get_logger
from hound.schemas.events import Commit, Event, FeedEntry
from hound.schemas.stats import StatItem
from .base import ATOM_NS, BaseSource, FetchOperation

log = get_logger("ingestion.gitlab")


class GitLabSource(BaseSource):
    """Fetches commits and the activity feed of one GitLab project."""

    name = "gitlab"

    def __init__(
        self,
        config: GitLabSettings,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.config = config

    def operations(self) -> List[FetchOperation]:
        return [
            FetchOperation(self.name, "repo_commits", self.repo_commits),
            FetchOperation(self.name, "activity_feed", self.activity_feed),
        ]

    def stats_operation(self) -> FetchOperation:
        return FetchOperation(self.name, "projects", self.projects)

    def _api_url(self, path: str) -> str:
        base = self.config.base_url.rstrip("/")
        api_path = "/" + self.config.api_path.strip("/")
        return f"{base}{api_path}/{path.lstrip('/')}"

    @property
    def _auth(self) -> Dict[str, str]:
        return self.headers(self.config.token, header="PRIVATE-TOKEN", scheme=None)

    async def repo_commits(self) -> List[Event]:
        data = await self.get_json(
            "repo_commits",
            self._api_url(f"projects/{self.config.project_id}/repository/commits"),
            headers=self._auth,
        )

        results: List[Event] = []
        for item in data:
            ts = self.parse_timestamp(item.get("created_at"))
            if not ts:
                continue
            try:
                payload = Commit(
                    short_id=item.get("short_id") or (item.get("id") or "")[:8],
                    title=item.get("title") or "",
                    author_name=item.get("author_name") or "",
                    created_at=ts,
                )
                event = Event(source=self.name, timestamp=ts, payload=payload)
            except (TypeError, ValidationError) as exc:
                log.warning(f"Skipping malformed GitLab commit {item.get('id')}: {exc}")
                continue
            results.append(event)
        log.info(f"Fetched {len(results)} commits from GitLab project {self.config.project_id}")
        return results

    async def activity_feed(self) -> List[Event]:
        url = self.config.base_url.rstrip("/") + "/" + self.config.repo_feed_path.lstrip("/")
        entries = await self.get_feed(
            "activity_feed", url, params={"private_token": self.config.token}
        )

        results: List[Event] = []
        for entry in entries:
            ts = self.parse_timestamp(self.entry_text(entry, "atom:updated"))
            if not ts:
                continue
            link = entry.find("atom:link", ATOM_NS)
            try:
                payload = FeedEntry(
                    title=self.entry_text(entry, "atom:title") or "",
                    updated=ts,
                    author=self.entry_text(entry, "atom:author/atom:name"),
                    link=link.get("href") if link is not None else None,
                )
                event = Event(source=self.name, timestamp=ts, payload=payload)
            except ValidationError as exc:
                log.warning(f"Skipping malformed GitLab feed entry: {exc}")
                continue
            results.append(event)
        log.info(f"Fetched {len(results)} feed entries from GitLab")
        return results

    async def projects(self) -> List[StatItem]:
        data = await self.get_json("projects", self._api_url("projects"), headers=self._auth)
        items = [
            StatItem(name=project.get("name") or "", description=project.get("description") or "")
            for project in data
        ]
        log.info(f"Fetched {len(items)} projects from GitLab")
        return items
