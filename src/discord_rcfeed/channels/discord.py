"""Discord webhook channel implementation."""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)


class DiscordWebhookChannel:
    """Discord webhook channel for posting formatted payloads.

    Payloads are posted exactly as the formatter serialized them. Delivery
    is attempted once; failures are logged and reported to the caller.
    """

    def __init__(self, webhook_url: str, *, timeout: float = 10.0) -> None:
        """Initialize Discord channel.

        Args:
            webhook_url: Discord webhook URL.
            timeout: HTTP request timeout in seconds.
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send(self, payload: str) -> bool:
        """Post a serialized payload to the webhook.

        Args:
            payload: JSON payload produced by RCFeedFormatter.

        Returns:
            True if delivery succeeded, False otherwise.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    content=payload.encode("utf-8"),
                    headers={"Content-Type": "application/json"},
                )
        except httpx.TimeoutException:
            logger.warning("Discord webhook timeout")
            return False
        except httpx.HTTPError as e:
            logger.error(f"Discord webhook error: {e}")
            return False

        if response.is_success:
            logger.info("Discord payload delivered successfully")
            return True

        logger.error(f"Discord webhook failed: {response.status_code} {response.text}")
        return False
