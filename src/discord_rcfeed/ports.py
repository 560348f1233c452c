"""Ports (interfaces) consumed by the formatting core.

The formatter never talks to a wiki directly. Titles, users, comments and
localized messages are resolved through these minimal contracts so that the
core can run against a live wiki, a static site description, or test fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from discord_rcfeed.models import ChangeEvent


class Title(Protocol):
    """A resolved page reference."""

    namespace: int
    text: str  # without namespace prefix
    full_text: str  # with namespace prefix

    def full_url(self, query: str = "") -> str:
        """Return the canonical URL, optionally with a query string."""
        ...


class WikiUser(Protocol):
    """A resolved user reference."""

    name: str

    def user_page(self) -> Title:
        """Return the user's own page."""
        ...

    def talk_page(self) -> Title:
        """Return the user's talk page."""
        ...


class EntityResolver(Protocol):
    """Resolves raw text into titles and users. Returns None when invalid."""

    def new_title(self, text: str) -> Title | None:
        """Parse title text, or return None if it is not a valid title."""
        ...

    def special_page(self, name: str, subpage: str = "") -> Title:
        """Return the special page 'name', with an optional subpage."""
        ...

    def new_user(self, name: str) -> WikiUser | None:
        """Return the user with this name, or None if the name is invalid."""
        ...


class MessageCatalog(Protocol):
    """Localized message lookup."""

    def exists(self, key: str) -> bool:
        """Return True if the catalog has a message for this key."""
        ...

    def text(self, key: str, *params: str, num_params: Iterable[int] = ()) -> str:
        """Return the rendered message, or an empty string if it is unknown."""
        ...


class CommentStore(Protocol):
    """Comment/summary storage lookup."""

    def get_comment(self, event: ChangeEvent) -> str:
        """Return the stored comment of the event."""
        ...


class EventCommentStore:
    """CommentStore reading the comment carried by the event itself."""

    def get_comment(self, event: ChangeEvent) -> str:
        return event.comment
