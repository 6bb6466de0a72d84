"""Timeline event envelope and the closed set of payload variants."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, FrozenSet, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SourceTag = Literal["github", "gitlab", "jira"]


class BasePayload(BaseModel):
    """Common base for payload variants; ``sources`` lists the tags allowed to carry it."""

    sources: ClassVar[FrozenSet[str]] = frozenset()

    model_config = ConfigDict(frozen=True)


class Commit(BasePayload):
    """GitLab repository commit."""

    sources = frozenset({"gitlab"})

    short_id: str
    title: str
    author_name: str
    created_at: datetime


class FeedEntry(BasePayload):
    """GitLab repository activity feed entry."""

    sources = frozenset({"gitlab"})

    title: str
    updated: datetime
    author: Optional[str] = None
    link: Optional[str] = None


class RepositoryEvent(BasePayload):
    """GitHub user-performed event."""

    sources = frozenset({"github"})

    type: str
    actor: str
    repo: str
    created_at: datetime
    payload: Dict[str, Any] = Field(default_factory=dict)


class Issue(BasePayload):
    """Jira issue."""

    sources = frozenset({"jira"})

    key: str
    summary: str
    created_at: datetime
    status: Optional[str] = None


class ActivityItem(BasePayload):
    """Jira activity stream entry, title is raw HTML."""

    sources = frozenset({"jira"})

    title: str
    updated: datetime
    author: Optional[str] = None


Payload = Union[Commit, FeedEntry, RepositoryEvent, Issue, ActivityItem]


class Event(BaseModel):
    """Uniform, immutable envelope around one timestamped record."""

    source: SourceTag
    timestamp: datetime
    payload: Payload

    model_config = ConfigDict(frozen=True)

    @field_validator("timestamp")
    @classmethod
    def _aware_timestamp(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _payload_matches_source(self) -> "Event":
        if self.source not in type(self.payload).sources:
            raise ValueError(
                f"{type(self.payload).__name__} payload cannot be tagged {self.source!r}"
            )
        return self
