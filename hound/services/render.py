"""Terminal rendering of timeline events, day headers and stats."""

from __future__ import annotations

import re
from datetime import tzinfo
from functools import singledispatch
from typing import Any, Callable, Dict, Optional

from bs4 import BeautifulSoup

from hound.schemas.events import ActivityItem, Commit, Event, FeedEntry, Issue, RepositoryEvent
from hound.schemas.stats import Stat, StatItem

RESET = "\033[0m"
BOLD = "\033[1m"
SEPARATOR = "⮀"
HEADER_WIDTH = 80

_WHITESPACE = re.compile(r"\s+")


def fg(code: int) -> str:
    return f"\033[38;5;{code}m"


def bg(code: int) -> str:
    return f"\033[48;5;{code}m"


def strip_html(value: str) -> str:
    """Plain text of an HTML fragment with whitespace runs collapsed."""
    text = BeautifulSoup(value, "html.parser").get_text(" ")
    return _WHITESPACE.sub(" ", text).strip()


# ---------------------------------------------------------------------------
# Payload descriptions
# ---------------------------------------------------------------------------
@singledispatch
def describe(payload: Any, bold: Callable[[str], str] = str) -> Optional[str]:
    """Description text of a payload; None for payloads outside the known variants."""
    return None


@describe.register
def _(payload: Commit, bold: Callable[[str], str] = str) -> str:
    return f"{payload.short_id} - {payload.title} by {bold(payload.author_name)}"


@describe.register
def _(payload: FeedEntry, bold: Callable[[str], str] = str) -> str:
    return payload.title


@describe.register
def _(payload: RepositoryEvent, bold: Callable[[str], str] = str) -> str:
    return github_message(payload)


@describe.register
def _(payload: Issue, bold: Callable[[str], str] = str) -> str:
    return f"{payload.key} - {payload.summary}"


@describe.register
def _(payload: ActivityItem, bold: Callable[[str], str] = str) -> str:
    return strip_html(payload.title)


def _push(event: RepositoryEvent) -> str:
    size = event.payload.get("size") or len(event.payload.get("commits") or [])
    ref = (event.payload.get("ref") or "").replace("refs/heads/", "")
    commits = "commit" if size == 1 else "commits"
    target = f"{ref} at {event.repo}" if ref else event.repo
    return f"pushed {size} {commits} to {target}"


def _create(event: RepositoryEvent) -> str:
    ref_type = event.payload.get("ref_type") or "repository"
    ref = event.payload.get("ref")
    if ref_type == "repository" or not ref:
        return f"created {ref_type} {event.repo}"
    return f"created {ref_type} {ref} at {event.repo}"


def _delete(event: RepositoryEvent) -> str:
    return f"deleted {event.payload.get('ref_type', 'ref')} {event.payload.get('ref', '')} at {event.repo}"


def _issues(event: RepositoryEvent) -> str:
    issue = event.payload.get("issue") or {}
    return f"{event.payload.get('action', 'updated')} issue {event.repo}#{issue.get('number', '?')}"


def _issue_comment(event: RepositoryEvent) -> str:
    issue = event.payload.get("issue") or {}
    return f"commented on issue {event.repo}#{issue.get('number', '?')}"


def _pull_request(event: RepositoryEvent) -> str:
    number = event.payload.get("number") or (event.payload.get("pull_request") or {}).get("number", "?")
    return f"{event.payload.get('action', 'updated')} pull request {event.repo}#{number}"


def _release(event: RepositoryEvent) -> str:
    release = event.payload.get("release") or {}
    return f"{event.payload.get('action', 'published')} release {release.get('tag_name', '')} at {event.repo}"


_GITHUB_MESSAGES: Dict[str, Callable[[RepositoryEvent], str]] = {
    "PushEvent": _push,
    "CreateEvent": _create,
    "DeleteEvent": _delete,
    "IssuesEvent": _issues,
    "IssueCommentEvent": _issue_comment,
    "PullRequestEvent": _pull_request,
    "ReleaseEvent": _release,
    "WatchEvent": lambda event: f"starred {event.repo}",
    "ForkEvent": lambda event: f"forked {event.repo}",
    "PublicEvent": lambda event: f"open sourced {event.repo}",
    "MemberEvent": lambda event: f"{event.payload.get('action', 'added')} a member to {event.repo}",
    "GollumEvent": lambda event: f"updated the wiki of {event.repo}",
    "PullRequestReviewCommentEvent": lambda event: f"commented on a pull request at {event.repo}",
    "CommitCommentEvent": lambda event: f"commented on a commit at {event.repo}",
}


def github_message(event: RepositoryEvent) -> str:
    build = _GITHUB_MESSAGES.get(event.type)
    if build is None:
        return f"{event.type} at {event.repo}"
    return build(event)


# ---------------------------------------------------------------------------
# Line templates
# ---------------------------------------------------------------------------
class Renderer:
    """Formats timeline lines; ``color=False`` yields plain text."""

    def __init__(self, color: bool = True, tz: Optional[tzinfo] = None):
        self.color = color
        self.tz = tz

    def _paint(self, text: str, *codes: str) -> str:
        if not self.color:
            return text
        return f"{''.join(codes)}{text}{RESET}"

    def bold(self, text: str) -> str:
        return self._paint(text, BOLD)

    def event(self, event: Event) -> str:
        description = describe(event.payload, self.bold)
        if description is None:
            return self.unexpected(event.payload)

        when = event.timestamp.astimezone(self.tz).strftime("%H:%M")
        if not self.color:
            return f" {when} | {event.source:<6} | {description}"
        return (
            f"{self._paint(f' {when} ', bg(87), fg(16))}"
            f"{self._paint(SEPARATOR, fg(87), bg(178))}"
            f"{self._paint(f' {event.source:<6} ', bg(178), fg(16))}"
            f"{self._paint(SEPARATOR, fg(178))} "
            f"{self._paint(description, fg(157))}"
        )

    def unexpected(self, payload: Any) -> str:
        return self._paint(f"unexpected type {type(payload).__name__}", fg(196))

    def day_header(self, label: str) -> str:
        return self._paint(f" {label:<{HEADER_WIDTH}} ", bg(94), fg(184))

    def stat(self, stat: Stat) -> list[str]:
        lines = [
            self._paint(f" {stat.name:<{HEADER_WIDTH}} ", bg(94), fg(184)),
            self._paint(f" {f'{len(stat.items)} items':<{HEADER_WIDTH}} ", bg(87), fg(16)),
        ]
        lines.extend(self.stat_item(item) for item in stat.items)
        return lines

    def stat_item(self, item: StatItem) -> str:
        if not self.color:
            return f" {item.name} -> {item.description}"
        return (
            f"{self._paint(f' {item.name} ', bg(178), fg(16))}"
            f"{self._paint(SEPARATOR, fg(178))} {self._paint(item.description, fg(157))}"
        )

    def banner(self, version: str) -> str:
        if not self.color:
            return f"HOUND V{version}"
        pad = self._paint(" " * 13, bg(157))
        edge = self._paint("  ", bg(157))
        return f"{pad}\n{edge}  {self._paint('HOUND', fg(157))}  {edge} {self._paint(f'V{version}', fg(157))}\n{pad}"

    def error(self, message: str) -> str:
        return self._paint(message, fg(196))

    def notice(self, message: str) -> str:
        return f"{self._paint('>', fg(237))} {self._paint(message, fg(94))}"
