"""Configuration management with Pydantic Settings.

This module loads the wiki site description, the Discord webhook and the
per-feed formatting options from environment variables (and an optional
``.env`` file) and validates them at startup.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from discord_rcfeed.models import EventKind


class ToolLabel(BaseModel):
    """Label of a tool link: a message key or a literal text."""

    msg: str | None = None
    text: str | None = None

    @model_validator(mode="after")
    def require_label(self) -> ToolLabel:
        """Ensure the tool has a label source."""
        if self.msg is None and self.text is None:
            raise ValueError("tool link needs either 'msg' or 'text'")
        return self


class UserTool(ToolLabel):
    """Link shown next to a user, e.g. talk page or contributions."""

    target: Literal["talk", "special"] = "special"
    special: str | None = None

    @model_validator(mode="after")
    def require_special(self) -> UserTool:
        """Special-page tools must name the special page."""
        if self.target == "special" and not self.special:
            raise ValueError("user tool with target 'special' needs 'special'")
        return self


class PageTool(ToolLabel):
    """Link shown next to a page, e.g. edit or history."""

    query: str

    @field_validator("query")
    @classmethod
    def strip_query(cls, v: str) -> str:
        """Drop a leading '?' so queries can be appended to any URL."""
        return v.lstrip("?")


def default_user_tools() -> list[UserTool]:
    return [
        UserTool(target="talk", msg="talkpagelinktext"),
        UserTool(target="special", special="Block", msg="blocklink"),
        UserTool(target="special", special="Contributions", msg="contribslink"),
    ]


def default_page_tools() -> list[PageTool]:
    return [
        PageTool(query="action=edit", msg="edit"),
        PageTool(query="action=history", msg="hist"),
    ]


class FeedSettings(BaseModel):
    """Formatting options of one notification destination.

    Attributes:
        omit_types: Event kinds never notified.
        omit_namespaces: Namespace ids never notified.
        omit_log_types: Log types never notified (e.g. "patrol").
        omit_log_actions: "type/action" pairs never notified.
        user_tools: Tool links appended to rendered users.
        page_tools: Tool links appended to rendered pages.
        request_override: Raw structure merged over the generated payload.
    """

    omit_types: set[EventKind] = Field(default_factory=set)
    omit_namespaces: set[int] = Field(default_factory=set)
    omit_log_types: set[str] = Field(default_factory=set)
    omit_log_actions: set[str] = Field(default_factory=set)
    user_tools: list[UserTool] = Field(default_factory=default_user_tools)
    page_tools: list[PageTool] = Field(default_factory=default_page_tools)
    request_override: dict[str, Any] | None = None

    @field_validator("omit_log_actions")
    @classmethod
    def validate_log_actions(cls, v: set[str]) -> set[str]:
        """Validate "type/action" format."""
        for item in v:
            if item.count("/") != 1:
                raise ValueError(f"omitted log action must be 'type/action', got {item!r}")
        return v


class WikiSettings(BaseSettings):
    """Wiki site settings."""

    model_config = SettingsConfigDict(env_prefix="WIKI_")

    sitename: str = Field(
        default="Wiki",
        alias="WIKI_SITENAME",
        description="Site name, used as the webhook username",
    )
    server: str = Field(
        default="http://localhost",
        alias="WIKI_SERVER",
        description="Scheme and host of the wiki",
    )
    article_path: str = Field(
        default="/wiki/$1",
        alias="WIKI_ARTICLE_PATH",
        description="Path template for page views",
    )
    script_path: str = Field(
        default="/w/index.php",
        alias="WIKI_SCRIPT_PATH",
        description="Path of index.php for query-string URLs",
    )

    @field_validator("server")
    @classmethod
    def validate_server(cls, v: str) -> str:
        """Validate server URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("WIKI_SERVER must be an HTTP(S) URL")
        return v.rstrip("/")

    @field_validator("article_path")
    @classmethod
    def validate_article_path(cls, v: str) -> str:
        """Validate article path contains the page placeholder."""
        if "$1" not in v:
            raise ValueError("WIKI_ARTICLE_PATH must contain $1")
        return v


class DiscordSettings(BaseSettings):
    """Discord webhook settings."""

    model_config = SettingsConfigDict(env_prefix="DISCORD_")

    webhook_url: SecretStr | None = Field(
        default=None,
        alias="DISCORD_WEBHOOK_URL",
        description="Discord webhook URL",
    )
    timeout: float = Field(
        default=10.0,
        alias="DISCORD_TIMEOUT",
        description="HTTP request timeout in seconds",
        gt=0,
    )

    @field_validator("webhook_url")
    @classmethod
    def validate_webhook_url(cls, v: SecretStr | None) -> SecretStr | None:
        """Validate webhook URL format."""
        if v is None:
            return v
        if not v.get_secret_value().startswith(("http://", "https://")):
            raise ValueError("DISCORD_WEBHOOK_URL must be an HTTP(S) URL")
        return v

    @property
    def enabled(self) -> bool:
        """Check if webhook delivery is configured."""
        return self.webhook_url is not None


class Settings(BaseSettings):
    """Main application settings.

    Example:
        ```python
        from discord_rcfeed.config import get_settings

        settings = get_settings()
        print(settings.wiki.sitename)
        print(settings.feed.omit_namespaces)
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Nested configuration groups
    wiki: WikiSettings = Field(default_factory=WikiSettings)
    discord: DiscordSettings = Field(default_factory=DiscordSettings)

    # Parsed from JSON, e.g. RCFEED_FEED='{"omit_log_types": ["patrol"]}'
    feed: FeedSettings = Field(
        default_factory=FeedSettings,
        alias="RCFEED_FEED",
        description="Feed formatting options",
    )

    # Application settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )
    dry_run: bool = Field(
        default=False,
        alias="DRY_RUN",
        description="Print payloads instead of posting them",
    )

    def get_logging_level(self) -> int:
        """Get the numeric logging level."""
        level: int = getattr(logging, self.log_level)
        return level

    def redacted_summary(self) -> dict[str, str]:
        """Get a summary of settings with secrets redacted."""
        webhook = self.discord.webhook_url
        return {
            "sitename": self.wiki.sitename,
            "server": self.wiki.server,
            "webhook_url": (
                self._redact_webhook(webhook.get_secret_value()) if webhook else "(not set)"
            ),
            "omit_types": ", ".join(sorted(k.value for k in self.feed.omit_types)) or "(none)",
            "log_level": self.log_level,
            "dry_run": str(self.dry_run),
        }

    @staticmethod
    def _redact_webhook(url: str) -> str:
        """Redact the token part of a webhook URL."""
        head, sep, _token = url.rpartition("/")
        if not sep or "://" not in head:
            return url
        return f"{head}/***"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Raises:
        ValidationError: If environment variables have invalid values.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when you need to reload settings with
    different environment variables.
    """
    get_settings.cache_clear()
