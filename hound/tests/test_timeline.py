"""Merge, day partitioning and rendering tests"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from hound.schemas.events import ActivityItem, Commit, Event, FeedEntry, Issue, RepositoryEvent
from hound.services.render import Renderer, describe, strip_html
from hound.services.timeline import DayHeader, merge_batches, partition_days, render_timeline


def issue(key, ts):
    return Event(source="jira", timestamp=ts, payload=Issue(key=key, summary=f"summary {key}", created_at=ts))


def commit(short_id, ts):
    return Event(
        source="gitlab",
        timestamp=ts,
        payload=Commit(short_id=short_id, title="Fix build", author_name="Ada", created_at=ts),
    )


class UnknownPayload:
    """Payload outside the known variants"""


class TestEvent:
    """Event envelope invariants"""

    def test_payload_must_match_source(self):
        """Test payload variant must match the source tag"""
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        with pytest.raises(ValidationError):
            Event(source="github", timestamp=ts, payload=Issue(key="A-1", summary="s", created_at=ts))

    def test_naive_timestamp_is_utc(self):
        """Test naive timestamps are stored as UTC"""
        event = issue("A-1", datetime(2024, 1, 1, 12, 0))
        assert event.timestamp.tzinfo == timezone.utc

    def test_event_is_immutable(self):
        """Test events cannot be modified"""
        event = issue("A-1", datetime(2024, 1, 1, tzinfo=timezone.utc))
        with pytest.raises(ValidationError):
            event.source = "github"


class TestMergeBatches:
    """Merged output ordering"""

    def test_descending_order(self):
        """Test merged events are newest first"""
        base = datetime(2024, 3, 1, tzinfo=timezone.utc)
        batches = [
            [issue("A-1", base), issue("A-2", base + timedelta(hours=5))],
            [commit("c1", base + timedelta(hours=2))],
            [],
            [commit("c2", base - timedelta(days=1)), commit("c3", base + timedelta(days=1))],
        ]
        merged = merge_batches(batches)
        assert len(merged) == 5
        for newer, older in zip(merged, merged[1:]):
            assert newer.timestamp >= older.timestamp
        assert merged[0].payload.short_id == "c3"

    def test_ties_keep_concatenation_order(self):
        """Test equal timestamps keep batch order"""
        ts = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)
        first = issue("A-1", ts)
        second = commit("c1", ts)
        assert merge_batches([[first], [second]]) == [first, second]
        assert merge_batches([[second], [first]]) == [second, first]

    def test_no_deduplication(self):
        """Test identical events from two batches are both kept"""
        ts = datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert len(merge_batches([[issue("A-1", ts)], [issue("A-1", ts)]])) == 2


class TestPartitionDays:
    """Day header emission"""

    def test_one_header_per_day(self):
        """Test one header is emitted per calendar day"""
        events = merge_batches([[
            issue("A-1", datetime(2024, 1, 1, 23, 0, tzinfo=timezone.utc)),
            issue("A-2", datetime(2024, 1, 2, 1, 0, tzinfo=timezone.utc)),
            issue("A-3", datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)),
        ]])
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)
        items = list(partition_days(events, now, timezone.utc))

        headers = [item for item in items if isinstance(item, DayHeader)]
        assert [header.label for header in headers] == ["Tuesday 02 January", "Monday 01 January"]
        assert isinstance(items[0], DayHeader)
        assert [type(item) for item in items[1:3]] == [Event, Event]
        assert items[3] is headers[1]

    def test_today_label(self):
        """Test the current day is labelled Today"""
        now = datetime(2024, 5, 10, 18, 0, tzinfo=timezone.utc)
        events = [issue("A-1", now - timedelta(hours=2)), issue("A-2", now - timedelta(days=1))]
        labels = [item.label for item in partition_days(events, now, timezone.utc) if isinstance(item, DayHeader)]
        assert labels == ["Today", "Thursday 09 May"]

    def test_same_day_of_year_in_other_year(self):
        """Test the same day of year in another year gets its own header"""
        now = datetime(2024, 5, 10, 18, 0, tzinfo=timezone.utc)
        events = [issue("A-1", now), issue("A-2", datetime(2023, 5, 11, tzinfo=timezone.utc))]
        labels = [item.label for item in partition_days(events, now, timezone.utc) if isinstance(item, DayHeader)]
        # 2024-05-10 and 2023-05-11 share day-of-year 131
        assert labels == ["Today", "Thursday 11 May"]

    def test_days_follow_given_timezone(self):
        """Test day boundaries use the given timezone"""
        tz = timezone(timedelta(hours=-5))
        events = [issue("A-1", datetime(2024, 1, 2, 3, 0, tzinfo=timezone.utc))]
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)
        header = next(partition_days(events, now, tz))
        assert header.label == "Monday 01 January"

    def test_empty_input(self):
        """Test no events yield no headers"""
        assert list(partition_days([], datetime.now(timezone.utc))) == []


class TestRender:
    """Render dispatch over payload variants"""

    @pytest.fixture
    def renderer(self):
        return Renderer(color=False, tz=timezone.utc)

    def test_issue_line(self, renderer):
        """Test issue line layout"""
        line = renderer.event(issue("HND-7", datetime(2024, 1, 1, 14, 5, tzinfo=timezone.utc)))
        assert line == " 14:05 | jira   | HND-7 - summary HND-7"

    def test_commit_line(self, renderer):
        """Test commit line layout"""
        line = renderer.event(commit("1a2b3c4d", datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)))
        assert line.endswith("1a2b3c4d - Fix build by Ada")

    def test_feed_entry_and_activity_item(self):
        """Test feed entry and activity item descriptions"""
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert describe(FeedEntry(title="Ada pushed to master", updated=ts)) == "Ada pushed to master"
        item = ActivityItem(title="<a href='#'>Ada</a>   changed\n <b>HND-1</b>", updated=ts)
        assert describe(item) == "Ada changed HND-1"

    def test_github_push_message(self):
        """Test push event message"""
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        payload = RepositoryEvent(
            type="PushEvent",
            actor="plouc",
            repo="plouc/hound",
            created_at=ts,
            payload={"ref": "refs/heads/master", "size": 2},
        )
        assert describe(payload) == "pushed 2 commits to master at plouc/hound"

    def test_github_unknown_event_type(self):
        """Test fallback message for unmapped GitHub event types"""
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        payload = RepositoryEvent(type="SponsorshipEvent", actor="plouc", repo="plouc/hound", created_at=ts)
        assert describe(payload) == "SponsorshipEvent at plouc/hound"

    def test_rendering_is_idempotent(self):
        """Test rendering the same event twice gives the same line"""
        renderer = Renderer(color=True, tz=timezone.utc)
        event = commit("1a2b3c4d", datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))
        assert renderer.event(event) == renderer.event(event)

    def test_unknown_variant_is_reported(self, renderer):
        """Test an unknown payload is reported and processing continues"""
        ts = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
        unknown = Event.model_construct(source="github", timestamp=ts, payload=UnknownPayload())
        events = [unknown, issue("A-1", ts - timedelta(hours=1))]

        lines = list(render_timeline(events, renderer, ts, timezone.utc))
        assert lines[1] == "unexpected type UnknownPayload"
        assert lines[2].endswith("A-1 - summary A-1")

    def test_strip_html(self):
        """Test HTML is stripped from activity titles"""
        assert strip_html("<p>a&nbsp;<i>b</i></p>") == "a b"
