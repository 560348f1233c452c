"""Rendering of users, pages and wiki links as Discord markdown."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from discord_rcfeed.config import PageTool, UserTool
    from discord_rcfeed.ports import EntityResolver, MessageCatalog, Title, WikiUser

logger = logging.getLogger(__name__)

# Discord does not decode percent-encoding in link targets by itself, so
# these characters would end or corrupt the markdown link.
URL_ESCAPES = (
    (" ", "%20"),
    ("(", "%28"),
    (")", "%29"),
)

PLAIN_LINK_PATTERN = re.compile(r"\[\[([^|\]]+)\]\]")
PIPED_LINK_PATTERN = re.compile(r"\[\[([^|]+)\|([^\]]+)\]\]")


def escape_url(url: str) -> str:
    """Percent-encode the characters Discord cannot take raw in a link target."""
    for search, replace in URL_ESCAPES:
        url = url.replace(search, replace)
    return url


def make_link(target: str, text: str) -> str:
    """Return ``[text](target)``, or the bare text when there is no target."""
    if not target:
        return text
    return f"[{text}]({escape_url(target)})"


class LinkRenderer:
    """Renders wiki entities as clickable Discord markdown.

    Users and pages are rendered as a link followed, when configured, by a
    parenthesized list of tool links (talk, contributions, edit, history...).
    """

    def __init__(
        self,
        resolver: EntityResolver,
        catalog: MessageCatalog,
        user_tools: Sequence[UserTool] = (),
        page_tools: Sequence[PageTool] = (),
    ) -> None:
        """Initialize the renderer.

        Args:
            resolver: Resolves title text and user names.
            catalog: Localized messages for tool labels and separators.
            user_tools: Tool links appended to rendered users.
            page_tools: Tool links appended to rendered pages.
        """
        self.resolver = resolver
        self.catalog = catalog
        self.user_tools = list(user_tools)
        self.page_tools = list(page_tools)

    def _label(self, tool: UserTool | PageTool) -> str:
        if tool.msg is not None:
            return self.catalog.text(tool.msg)
        return tool.text or ""

    def _nice_tools(self, tools: list[str]) -> str:
        joined = self.catalog.text("pipe-separator").join(tools)
        return self.catalog.text("parentheses", joined)

    def render_user(self, user: WikiUser) -> str:
        """Render a user as a link to their user page, plus user tools."""
        rendered = make_link(user.user_page().full_url(), user.name)
        if not self.user_tools:
            return rendered

        tools = []
        for tool in self.user_tools:
            if tool.target == "talk":
                link = user.talk_page().full_url()
            else:
                link = self.resolver.special_page(tool.special or "", user.name).full_url()
            tools.append(make_link(link, self._label(tool)))
        return f"{rendered} {self._nice_tools(tools)}"

    def render_page(
        self,
        title: Title,
        this_oldid: int | None = None,
        last_oldid: int | None = None,
    ) -> str:
        """Render a page link, plus page tools and a diff link when possible.

        The diff link is only added when both revision ids are set.
        """
        rendered = make_link(title.full_url(), title.full_text)
        if not self.page_tools:
            return rendered

        tools = [
            make_link(title.full_url(tool.query), self._label(tool)) for tool in self.page_tools
        ]
        if this_oldid and last_oldid:
            tools.append(
                make_link(
                    title.full_url(f"diff={this_oldid}&oldid={last_oldid}"),
                    self.catalog.text("diff"),
                )
            )
        return f"{rendered} {self._nice_tools(tools)}"

    def linkify(self, text: str, actor: WikiUser | None = None) -> str:
        """Turn a leading actor name and ``[[wiki links]]`` into Discord links.

        Each distinct link fragment is replaced everywhere it occurs in the
        text, so two identical fragments always render the same way. Targets
        that do not resolve to a title are left as they are.

        Args:
            text: Sanitized comment or log action text.
            actor: User whose name, if it starts the text, gets linked.

        Returns:
            Text with Discord markdown links.
        """
        if actor is not None and text.startswith(actor.name):
            text = self.render_user(actor) + text[len(actor.name) :]

        for match in PLAIN_LINK_PATTERN.finditer(text):
            title = self.resolver.new_title(match.group(1))
            if title is None:
                logger.debug(f"Leaving unresolvable link as is: {match.group(0)}")
                continue
            text = text.replace(match.group(0), self.render_page(title))

        for match in PIPED_LINK_PATTERN.finditer(text):
            title = self.resolver.new_title(match.group(1))
            if title is None:
                logger.debug(f"Leaving unresolvable link as is: {match.group(0)}")
                continue
            text = text.replace(match.group(0), make_link(title.full_url(), match.group(2)))

        return text
