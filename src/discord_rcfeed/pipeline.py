"""Feed pipeline: read change events, format them and deliver the payloads."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TextIO

from discord_rcfeed.formatter import RCFeedFormatter
from discord_rcfeed.messages import Catalog
from discord_rcfeed.models import ChangeEvent
from discord_rcfeed.wiki import Site

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from discord_rcfeed.channels.discord import DiscordWebhookChannel
    from discord_rcfeed.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class FeedResult:
    """Counters of one pipeline run."""

    formatted: int = 0
    omitted: int = 0
    invalid: int = 0
    delivered: int = 0
    failed: int = 0


def build_formatter(settings: Settings, catalog: Catalog | None = None) -> RCFeedFormatter:
    """Create a formatter for the configured wiki and feed."""
    site = Site(
        server=settings.wiki.server,
        article_path=settings.wiki.article_path,
        script_path=settings.wiki.script_path,
    )
    return RCFeedFormatter(
        settings.feed,
        site,
        catalog or Catalog(),
        sitename=settings.wiki.sitename,
    )


def _records(text: str) -> list[Any]:
    stripped = text.strip()
    if not stripped:
        return []
    try:
        data = json.loads(stripped)
    except json.JSONDecodeError:
        # JSON lines, one record per line
        return [json.loads(line) for line in stripped.splitlines() if line.strip()]

    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return []
    # Full API response: {"query": {"recentchanges": [...]}}
    if "query" in data:
        query = data["query"]
        changes = query.get("recentchanges") if isinstance(query, dict) else None
        return changes if isinstance(changes, list) else []
    return [data]


def read_events(stream: TextIO, result: FeedResult | None = None) -> Iterator[ChangeEvent]:
    """Read change events from a JSON list, an API response or JSON lines.

    Records that are not objects or do not describe a known event kind are
    skipped and counted as invalid.

    Raises:
        json.JSONDecodeError: If the input is not valid JSON.
    """
    for record in _records(stream.read()):
        if not isinstance(record, dict):
            logger.warning(f"Skipping change record that is not an object: {record!r}")
            if result is not None:
                result.invalid += 1
            continue
        try:
            yield ChangeEvent.from_api(record)
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping invalid change record: {e}")
            if result is not None:
                result.invalid += 1


async def run_feed(
    events: Iterable[ChangeEvent],
    formatter: RCFeedFormatter,
    channel: DiscordWebhookChannel | None,
    out: TextIO,
    result: FeedResult | None = None,
) -> FeedResult:
    """Format events and post (or print, without a channel) each payload.

    Args:
        events: Change events in feed order.
        formatter: Formatter bound to the destination.
        channel: Webhook channel, or None to write payloads to ``out``.
        out: Output stream for payloads in dry-run mode.
        result: Counters to update, a new one by default.

    Returns:
        FeedResult with the run counters.
    """
    result = result or FeedResult()
    for event in events:
        payload = formatter.format(event)
        if payload is None:
            result.omitted += 1
            continue
        result.formatted += 1

        if channel is None:
            out.write(payload + "\n")
            continue

        if await channel.send(payload):
            result.delivered += 1
        else:
            result.failed += 1

    logger.info(
        f"Feed complete: {result.formatted} formatted, {result.omitted} omitted, "
        f"{result.delivered} delivered, {result.failed} failed"
    )
    return result
