"""Shared constants for event classification and embed styling."""

from __future__ import annotations

from discord_rcfeed.models import EventKind

# Namespace ids
NS_MAIN = 0
NS_USER = 2
NS_USER_TALK = 3
NS_SPECIAL = -1

# Discord embed colors (decimal values)
COLOR_DEFAULT = 10725809  # Grey (#A3A9B1)

COLOR_MAP_ACTION: dict[EventKind, int] = {
    EventKind.EDIT: 3368652,  # Blue (#3366CC)
    EventKind.NEW: 44937,  # Green (#00AF89)
    EventKind.LOG: 16763955,  # Yellow (#FFCC33)
}

COLOR_MAP_LOG: dict[str, int] = {
    "block": 14496563,  # Red (#DD3333)
    "delete": 14496563,
    "suppress": 14496563,
    "move": 16744192,  # Orange (#FF8000)
    "merge": 16744192,
    "protect": 10027161,  # Purple (#990099)
    "rights": 10027161,
    "upload": 3368652,
    "newusers": 44937,
    "patrol": 8750469,  # Light grey (#858585)
}

# Message keys
LINE_MESSAGE_PREFIX = "discordrcfeed-line-"
EMOJI_MESSAGE_PREFIX = "discordrcfeed-emoji-log-"
SUMMARY_MESSAGE = "discordrcfeed-summary"
