"""Tests for the feed pipeline."""

from __future__ import annotations

import io
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from discord_rcfeed.config import FeedSettings, Settings
from discord_rcfeed.formatter import RCFeedFormatter
from discord_rcfeed.messages import Catalog
from discord_rcfeed.models import ChangeEvent, EventKind
from discord_rcfeed.pipeline import FeedResult, build_formatter, read_events, run_feed
from discord_rcfeed.wiki import Site

EDIT_RECORD = {"type": "edit", "ns": 0, "title": "Foo", "user": "Alice", "comment": "c"}
LOG_RECORD = {
    "type": "log",
    "ns": 0,
    "title": "Bar",
    "user": "Bob",
    "logtype": "patrol",
    "logaction": "patrol",
}

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def formatter(site: Site, catalog: Catalog) -> RCFeedFormatter:
    """Create a formatter omitting patrol log entries."""
    feed = FeedSettings(omit_log_types={"patrol"}, user_tools=[], page_tools=[])
    return RCFeedFormatter(feed, site, catalog, sitename="Test Wiki")


@pytest.fixture
def events() -> list[ChangeEvent]:
    """Create one notified and one omitted event."""
    return [ChangeEvent.from_api(EDIT_RECORD), ChangeEvent.from_api(LOG_RECORD)]


# ============================================================================
# Input Tests
# ============================================================================


class TestReadEvents:
    """Tests for reading change records."""

    def test_json_list(self) -> None:
        """Test a JSON array of records."""
        stream = io.StringIO(json.dumps([EDIT_RECORD, LOG_RECORD]))
        events = list(read_events(stream))

        assert [e.kind for e in events] == [EventKind.EDIT, EventKind.LOG]

    def test_json_lines(self) -> None:
        """Test one record per line."""
        stream = io.StringIO(f"{json.dumps(EDIT_RECORD)}\n\n{json.dumps(LOG_RECORD)}\n")
        assert len(list(read_events(stream))) == 2

    def test_api_response(self) -> None:
        """Test a full recentchanges API response."""
        response = {"batchcomplete": "", "query": {"recentchanges": [EDIT_RECORD]}}
        stream = io.StringIO(json.dumps(response, indent=2))
        events = list(read_events(stream))

        assert len(events) == 1
        assert events[0].title == "Foo"

    def test_single_record(self) -> None:
        """Test a single record object."""
        assert len(list(read_events(io.StringIO(json.dumps(EDIT_RECORD))))) == 1

    def test_empty_input(self) -> None:
        """Test that empty input gives no events."""
        assert list(read_events(io.StringIO("  \n"))) == []

    def test_invalid_records_skipped(self) -> None:
        """Test that unknown record types are counted and skipped."""
        result = FeedResult()
        stream = io.StringIO(json.dumps([{"type": "flow"}, EDIT_RECORD]))
        events = list(read_events(stream, result))

        assert len(events) == 1
        assert result.invalid == 1

    @pytest.mark.parametrize("records", [[None, 1], ["edit"], [[EDIT_RECORD]]])
    def test_non_object_records_skipped(self, records: list[object]) -> None:
        """Test that list items which are not objects are counted as invalid."""
        result = FeedResult()
        stream = io.StringIO(json.dumps([*records, EDIT_RECORD]))
        events = list(read_events(stream, result))

        assert len(events) == 1
        assert result.invalid == len(records)

    @pytest.mark.parametrize(
        "text",
        ["null", "42", "\"edit\"", '{"query": []}', '{"query": {"recentchanges": 5}}'],
    )
    def test_top_level_without_records(self, text: str) -> None:
        """Test that JSON without a record list gives no events."""
        result = FeedResult()

        assert list(read_events(io.StringIO(text), result)) == []
        assert result.invalid == 0

    def test_invalid_json_raises(self) -> None:
        """Test that malformed input is reported."""
        with pytest.raises(json.JSONDecodeError):
            list(read_events(io.StringIO("{not json\n")))


# ============================================================================
# Run Tests
# ============================================================================


class TestRunFeed:
    """Tests for running the feed."""

    @pytest.mark.asyncio
    async def test_dry_run_writes_payloads(
        self, formatter: RCFeedFormatter, events: list[ChangeEvent]
    ) -> None:
        """Test that payloads are printed without a channel."""
        out = io.StringIO()
        result = await run_feed(events, formatter, None, out)

        lines = out.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["username"] == "Test Wiki"
        assert result.formatted == 1
        assert result.omitted == 1
        assert result.delivered == 0

    @pytest.mark.asyncio
    async def test_delivery_counts(
        self, formatter: RCFeedFormatter, events: list[ChangeEvent]
    ) -> None:
        """Test delivered and failed counters."""
        channel = MagicMock()
        channel.send = AsyncMock(side_effect=[True, False])
        out = io.StringIO()

        result = await run_feed(events + events, formatter, channel, out)

        assert channel.send.await_count == 2
        assert result.delivered == 1
        assert result.failed == 1
        assert out.getvalue() == ""

    @pytest.mark.asyncio
    async def test_payload_passed_unchanged(
        self, formatter: RCFeedFormatter, events: list[ChangeEvent]
    ) -> None:
        """Test that the channel receives the formatter's exact output."""
        channel = MagicMock()
        channel.send = AsyncMock(return_value=True)

        await run_feed(events[:1], formatter, channel, io.StringIO())

        channel.send.assert_awaited_once_with(formatter.format(events[0]))


class TestBuildFormatter:
    """Tests for building a formatter from settings."""

    def test_uses_site_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that site name and URL layout come from settings."""
        monkeypatch.setenv("WIKI_SITENAME", "Example Wiki")
        monkeypatch.setenv("WIKI_SERVER", "https://example.org")
        monkeypatch.setenv("WIKI_ARTICLE_PATH", "/view/$1")
        monkeypatch.delenv("RCFEED_FEED", raising=False)

        formatter = build_formatter(Settings())
        payload = formatter.format(ChangeEvent.from_api(EDIT_RECORD))

        assert payload is not None
        data = json.loads(payload)
        assert data["username"] == "Example Wiki"
        assert "https://example.org/view/Foo" in data["embeds"][0]["description"]
