"""Data models for wiki change events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class EventKind(str, Enum):
    """Kind of a recent change, as reported by the wiki feed."""

    EDIT = "edit"
    NEW = "new"
    LOG = "log"
    EXTERNAL = "external"
    CATEGORIZE = "categorize"


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


@dataclass(frozen=True)
class ChangeEvent:
    """One entry of the wiki's recent changes feed.

    Attributes:
        kind: Edit, page creation or log action.
        namespace: Namespace id of the target page.
        title: Full title text of the target page (with namespace prefix).
        performer: Name of the user who made the change.
        comment: Edit summary for edits, formatted action text for log events.
        old_len: Page size before the edit, if known.
        new_len: Page size after the edit, if known.
        log_type: Log type (e.g. "delete"), log events only.
        log_action: Log action (e.g. "restore"), log events only.
        this_oldid: Revision id created by the edit.
        last_oldid: Revision id the edit was based on.
        minor: Whether the edit was flagged minor.
        bot: Whether the change was made by a bot.
    """

    kind: EventKind
    namespace: int
    title: str
    performer: str
    comment: str = ""

    # Edits only
    old_len: int | None = None
    new_len: int | None = None
    this_oldid: int | None = None
    last_oldid: int | None = None

    # Log events only
    log_type: str = ""
    log_action: str = ""

    minor: bool = False
    bot: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ChangeEvent:
        """Create a ChangeEvent from a MediaWiki ``list=recentchanges`` record.

        Boolean flags follow the API convention where ``minor`` and ``bot``
        are present (with an empty or true value) only when set.

        Args:
            data: A single record of the API response.

        Returns:
            ChangeEvent instance.

        Raises:
            ValueError: If the record type is not a known event kind.
        """
        return cls(
            kind=EventKind(str(data.get("type", ""))),
            namespace=int(data.get("ns", 0)),
            title=str(data.get("title", "")),
            performer=str(data.get("user", "")),
            comment=str(data.get("comment", "")),
            old_len=_optional_int(data.get("oldlen")),
            new_len=_optional_int(data.get("newlen")),
            this_oldid=_optional_int(data.get("revid")),
            last_oldid=_optional_int(data.get("old_revid")),
            log_type=str(data.get("logtype", "")),
            log_action=str(data.get("logaction", "")),
            minor=data.get("minor", False) is not False,
            bot=data.get("bot", False) is not False,
        )

    @property
    def is_log(self) -> bool:
        """Return True for log events."""
        return self.kind is EventKind.LOG

    @property
    def is_content_change(self) -> bool:
        """Return True for edits and page creations."""
        return self.kind in (EventKind.EDIT, EventKind.NEW)

    @property
    def log_key(self) -> str:
        """Return the "type/action" pair used by log action filters."""
        return f"{self.log_type}/{self.log_action}"

    @property
    def size_delta(self) -> int | None:
        """Return new length minus old length, or None if either is unknown."""
        if self.old_len is None or self.new_len is None:
            return None
        return self.new_len - self.old_len
