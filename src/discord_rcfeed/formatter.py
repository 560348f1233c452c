"""Recent change formatter for Discord webhooks.

This module turns ChangeEvent objects into serialized Discord webhook
payloads: it filters out omitted events, picks the embed color and emoji,
renders a localized, link-annotated description and applies the feed's
payload override.
"""

from __future__ import annotations

import html
import json
import logging
from typing import TYPE_CHECKING, Any

from discord_rcfeed.constants import (
    COLOR_DEFAULT,
    COLOR_MAP_ACTION,
    COLOR_MAP_LOG,
    EMOJI_MESSAGE_PREFIX,
    LINE_MESSAGE_PREFIX,
    NS_USER,
    SUMMARY_MESSAGE,
)
from discord_rcfeed.link_renderer import LinkRenderer
from discord_rcfeed.merge import replace_recursive
from discord_rcfeed.messages import first_existing
from discord_rcfeed.models import EventKind
from discord_rcfeed.ports import EventCommentStore

if TYPE_CHECKING:
    from discord_rcfeed.config import FeedSettings
    from discord_rcfeed.models import ChangeEvent
    from discord_rcfeed.ports import (
        CommentStore,
        EntityResolver,
        MessageCatalog,
        WikiUser,
    )

logger = logging.getLogger(__name__)


def cleanup_comment(text: str) -> str:
    """Remove newlines and carriage returns and decode HTML entities."""
    text = text.replace("\n", " ").replace("\r", "")
    return html.unescape(text)


def get_log_color(log_type: str) -> int:
    """Get embed color for a log type, falling back to the generic log color."""
    return COLOR_MAP_LOG.get(log_type, COLOR_MAP_ACTION[EventKind.LOG])


def get_action_color(kind: EventKind) -> int:
    """Get embed color for an event kind."""
    return COLOR_MAP_ACTION.get(kind, COLOR_DEFAULT)


def get_event_flags(event: ChangeEvent) -> list[str]:
    """Get the flags selecting the message template of a content change."""
    flags = ["new" if event.kind is EventKind.NEW else "edit"]
    if event.minor:
        flags.append("minor")
    if event.bot:
        flags.append("bot")
    return flags


class RCFeedFormatter:
    """Formats recent changes into Discord webhook payloads.

    A formatter is bound to one destination's FeedSettings and holds no
    per-event state, so a single instance can format events from any number
    of callers.
    """

    def __init__(
        self,
        feed: FeedSettings,
        resolver: EntityResolver,
        catalog: MessageCatalog,
        *,
        sitename: str,
        comment_store: CommentStore | None = None,
    ) -> None:
        """Initialize the formatter.

        Args:
            feed: Destination filters, tool links and payload override.
            resolver: Resolves titles and user names.
            catalog: Localized messages.
            sitename: Webhook username shown in Discord.
            comment_store: Source of edit summaries, defaults to the event comment.
        """
        self.feed = feed
        self.resolver = resolver
        self.catalog = catalog
        self.sitename = sitename
        self.comment_store = comment_store or EventCommentStore()
        self.link_renderer = LinkRenderer(
            resolver,
            catalog,
            user_tools=feed.user_tools,
            page_tools=feed.page_tools,
        )

    def is_omitted(self, event: ChangeEvent) -> bool:
        """Return True if the feed settings exclude this event."""
        if event.kind in self.feed.omit_types:
            return True
        if event.is_log and (
            event.log_type in self.feed.omit_log_types
            or event.log_key in self.feed.omit_log_actions
        ):
            return True
        return event.namespace in self.feed.omit_namespaces

    def format(self, event: ChangeEvent) -> str | None:
        """Format a change event into a JSON webhook payload.

        Args:
            event: The change to notify.

        Returns:
            Serialized payload, or None if the event is not notified.
        """
        if self.is_omitted(event):
            logger.debug(f"Omitting {event.kind.value} event on {event.title!r}")
            return None

        if event.is_log:
            return self._format_log(event)
        if event.is_content_change:
            return self._format_content_change(event)

        logger.debug(f"No format for {event.kind.value} events")
        return None

    def _performer(self, event: ChangeEvent) -> WikiUser | None:
        return self.resolver.new_user(event.performer)

    def _render_performer(self, event: ChangeEvent) -> str:
        performer = self._performer(event)
        if performer is None:
            return event.performer
        return self.link_renderer.render_user(performer)

    def _format_log(self, event: ChangeEvent) -> str:
        comment = cleanup_comment(event.comment)
        comment = self.link_renderer.linkify(comment)

        emoji = self.get_log_emoji(event.log_type, event.log_action)
        description = " ".join([emoji, self._render_performer(event), comment])

        return self.make_post_data(description, get_log_color(event.log_type))

    def _format_content_change(self, event: ChangeEvent) -> str:
        comment = cleanup_comment(self.comment_store.get_comment(event))
        message_key = LINE_MESSAGE_PREFIX + "-".join(get_event_flags(event))

        params = [
            # $1: performer link, $2: performer name for gender
            self._render_performer(event),
            event.performer,
        ]
        params.extend(self._target_params(event))
        message = self.catalog.text(message_key, *params)

        size_delta = event.size_delta
        size_text = (
            self.catalog.text("historysize", num_params=[size_delta])
            if size_delta is not None
            else ""
        )

        description = " ".join([message, size_text])
        return self.make_post_data(description, get_action_color(event.kind), comment)

    def _target_params(self, event: ChangeEvent) -> list[str]:
        """Get the $3 (and $4) message params describing the changed page."""
        title = self.resolver.new_title(event.title)
        if title is None:
            return [event.title]

        # A user page is shown as the user it belongs to
        if title.namespace == NS_USER:
            target_user = self.resolver.new_user(title.text)
            if target_user is not None:
                return [self.link_renderer.render_user(target_user), target_user.name]

        return [self.link_renderer.render_page(title, event.this_oldid, event.last_oldid)]

    def get_log_emoji(self, log_type: str, log_action: str) -> str:
        """Get the emoji for a log entry, most specific message first."""
        return first_existing(
            self.catalog,
            [
                f"{EMOJI_MESSAGE_PREFIX}{log_type}-{log_action}",
                f"{EMOJI_MESSAGE_PREFIX}{log_type}",
            ],
        )

    def build_post(
        self,
        description: str,
        color: int = COLOR_DEFAULT,
        summary: str | None = None,
    ) -> dict[str, Any]:
        """Build the webhook payload structure, override applied.

        Args:
            description: Embed description text.
            color: Embed color.
            summary: Edit summary, shown as a separate field when non-empty.

        Returns:
            Payload dictionary.
        """
        embed: dict[str, Any] = {
            "color": color,
            "description": description,
        }
        if summary:
            embed["fields"] = [
                {
                    "name": self.catalog.text(SUMMARY_MESSAGE),
                    "value": summary,
                },
            ]

        post: dict[str, Any] = {
            "embeds": [embed],
            "username": self.sitename,
        }
        if self.feed.request_override:
            post = replace_recursive(post, self.feed.request_override)
        return post

    def make_post_data(
        self,
        description: str,
        color: int = COLOR_DEFAULT,
        summary: str | None = None,
    ) -> str:
        """Build and serialize the webhook payload."""
        return json.dumps(self.build_post(description, color, summary))
