"""Abstract source interface for ingestion."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional
from xml.etree import ElementTree

import httpx

from hound.core.errors import SourceFetchError

ATOM_NS = {"atom": "http://www.w3.org/2005/Atom"}


@dataclass(frozen=True)
class FetchOperation:
    """One independent, zero-argument fetch against a source."""

    source: str
    name: str
    fetch: Callable[[], Awaitable[List[Any]]]

    @property
    def label(self) -> str:
        return f"{self.source}.{self.name}"


class BaseSource(ABC):
    """Abstract base class for activity providers."""

    name: str

    def __init__(self, timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport

    @abstractmethod
    def operations(self) -> List[FetchOperation]:
        """Timeline fetch operations offered by this source."""

    @abstractmethod
    def stats_operation(self) -> FetchOperation:
        """Fetch operation listing the items the user owns on this source."""

    def client(self, **kwargs: Any) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport, **kwargs)

    async def get_json(self, operation: str, url: str, **kwargs: Any) -> Any:
        async with self.client() as client:
            resp = await self._get(client, operation, url, **kwargs)
        try:
            return resp.json()
        except ValueError as exc:
            raise SourceFetchError(self.name, operation, f"invalid JSON: {exc}") from exc

    async def get_feed(self, operation: str, url: str, **kwargs: Any) -> List[ElementTree.Element]:
        """Fetch an Atom feed and return its ``entry`` elements."""
        async with self.client() as client:
            resp = await self._get(client, operation, url, **kwargs)
        try:
            root = ElementTree.fromstring(resp.content)
        except ElementTree.ParseError as exc:
            raise SourceFetchError(self.name, operation, f"invalid feed: {exc}") from exc
        return root.findall("atom:entry", ATOM_NS)

    async def _get(self, client: httpx.AsyncClient, operation: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await client.get(url, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise SourceFetchError(self.name, operation, str(exc)) from exc
        return resp

    @staticmethod
    def entry_text(entry: ElementTree.Element, path: str) -> Optional[str]:
        node = entry.find(path, ATOM_NS)
        if node is None or node.text is None:
            return None
        return node.text.strip()

    @staticmethod
    def parse_timestamp(value: Any) -> Optional[datetime]:
        """Parse an ISO string or datetime into UTC; offset-less values are taken as UTC."""
        if not value:
            return None
        try:
            if isinstance(value, str):
                value = value.replace("Z", "+00:00")
                # Jira emits offsets without a colon, e.g. +0100
                if len(value) > 5 and value[-5] in "+-" and value[-4:].isdigit():
                    value = f"{value[:-2]}:{value[-2:]}"
                value = datetime.fromisoformat(value)
            if isinstance(value, datetime):
                if value.tzinfo is None:
                    return value.replace(tzinfo=timezone.utc)
                return value.astimezone(timezone.utc)
        except ValueError:
            return None
        return None

    @staticmethod
    def headers(token: Optional[str], header: str = "Authorization", scheme: Optional[str] = "token") -> Dict[str, str]:
        if not token:
            return {}
        return {header: f"{scheme} {token}" if scheme else token}
