"""Delivery channels for formatted payloads."""

from discord_rcfeed.channels.discord import DiscordWebhookChannel

__all__ = [
    "DiscordWebhookChannel",
]
