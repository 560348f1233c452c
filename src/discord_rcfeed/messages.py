"""Localized message catalog.

Messages use the wiki's own syntax: ``$1``..``$n`` placeholders and
``{{PLURAL:$n|one|other}}`` for number-dependent wording.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from discord_rcfeed.ports import MessageCatalog

DEFAULT_MESSAGES: dict[str, str] = {
    # Generic interface messages
    "parentheses": "($1)",
    "pipe-separator": " | ",
    "diff": "diff",
    "hist": "hist",
    "edit": "edit",
    "delete": "delete",
    "talkpagelinktext": "talk",
    "contribslink": "contribs",
    "blocklink": "block",
    "historysize": "({{PLURAL:$1|$1 byte|$1 bytes}})",
    # Feed lines: $1 performer link, $2 performer name, $3 page or user link
    "discordrcfeed-line-edit": "$1 edited $3",
    "discordrcfeed-line-edit-minor": "$1 made a minor edit to $3",
    "discordrcfeed-line-edit-bot": "$1 edited $3 (bot)",
    "discordrcfeed-line-edit-minor-bot": "$1 made a minor edit to $3 (bot)",
    "discordrcfeed-line-new": "$1 created $3",
    "discordrcfeed-line-new-bot": "$1 created $3 (bot)",
    "discordrcfeed-summary": "Summary",
    # Log emoji
    "discordrcfeed-emoji-log-block": "\U0001f6ab",
    "discordrcfeed-emoji-log-block-unblock": "✅",
    "discordrcfeed-emoji-log-delete": "\U0001f5d1️",
    "discordrcfeed-emoji-log-delete-restore": "♻️",
    "discordrcfeed-emoji-log-move": "➡️",
    "discordrcfeed-emoji-log-protect": "\U0001f512",
    "discordrcfeed-emoji-log-protect-unprotect": "\U0001f513",
    "discordrcfeed-emoji-log-upload": "\U0001f5bc️",
    "discordrcfeed-emoji-log-newusers": "\U0001f44b",
    "discordrcfeed-emoji-log-rights": "\U0001f511",
}

PARAM_PATTERN = re.compile(r"\$(\d+)")
PLURAL_PATTERN = re.compile(r"\{\{PLURAL:([^|}]*)\|([^}]*)\}\}", re.IGNORECASE)


def format_number(value: int) -> str:
    """Format an integer with thousands separators."""
    return f"{value:,}"


def first_existing(catalog: MessageCatalog, keys: Iterable[str], default: str = "") -> str:
    """Return the text of the first key the catalog knows, in priority order."""
    for key in keys:
        if catalog.exists(key):
            return catalog.text(key)
    return default


class Catalog:
    """Dictionary-backed message catalog.

    Unknown keys render as an empty string so that a missing translation
    never breaks formatting.
    """

    def __init__(
        self,
        messages: Mapping[str, str] | None = None,
        *,
        include_defaults: bool = True,
    ) -> None:
        """Initialize the catalog.

        Args:
            messages: Messages overriding or extending the defaults.
            include_defaults: Whether to start from DEFAULT_MESSAGES.
        """
        self._messages: dict[str, str] = dict(DEFAULT_MESSAGES) if include_defaults else {}
        if messages:
            self._messages.update(messages)

    def exists(self, key: str) -> bool:
        return key in self._messages

    def text(self, key: str, *params: str, num_params: Iterable[int] = ()) -> str:
        template = self._messages.get(key)
        if template is None:
            return ""

        numbers = list(num_params)
        values = [str(p) for p in params] + [format_number(n) for n in numbers]
        raw_values = [str(p) for p in params] + [str(n) for n in numbers]

        def substitute(text: str, source: list[str]) -> str:
            def repl(match: re.Match[str]) -> str:
                index = int(match.group(1)) - 1
                if 0 <= index < len(source):
                    return source[index]
                return match.group(0)

            return PARAM_PATTERN.sub(repl, text)

        def plural(match: re.Match[str]) -> str:
            forms = match.group(2).split("|")
            try:
                count = abs(int(substitute(match.group(1), raw_values).strip()))
            except ValueError:
                return forms[-1]
            if count == 1:
                return forms[0]
            return forms[1] if len(forms) > 1 else forms[0]

        # PLURAL must see the raw numbers, before grouping separators are added
        template = PLURAL_PATTERN.sub(plural, template)
        return substitute(template, values)
