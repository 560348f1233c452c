"""Tests for the Discord webhook channel."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from discord_rcfeed.channels.discord import DiscordWebhookChannel

WEBHOOK_URL = "https://discord.com/api/webhooks/123/abc"
PAYLOAD = '{"embeds": [{"color": 1, "description": "x"}], "username": "Wiki"}'


def mock_client_returning(response: object) -> AsyncMock:
    """Create a mocked AsyncClient context manager."""
    mock_client = AsyncMock()
    mock_client.post.return_value = response
    mock_client.__aenter__.return_value = mock_client
    mock_client.__aexit__.return_value = None
    return mock_client


class TestDiscordWebhookChannel:
    """Tests for DiscordWebhookChannel."""

    def test_init(self) -> None:
        """Test channel initialization."""
        channel = DiscordWebhookChannel(WEBHOOK_URL, timeout=5.0)

        assert channel.webhook_url == WEBHOOK_URL
        assert channel.timeout == 5.0

    @pytest.mark.asyncio
    async def test_send_success(self) -> None:
        """Test successful delivery posts the payload as is."""
        channel = DiscordWebhookChannel(WEBHOOK_URL)

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_response = MagicMock()
            mock_response.status_code = 204
            mock_response.is_success = True
            mock_client = mock_client_returning(mock_response)
            mock_client_class.return_value = mock_client

            result = await channel.send(PAYLOAD)

            assert result is True
            mock_client.post.assert_called_once_with(
                WEBHOOK_URL,
                content=PAYLOAD.encode("utf-8"),
                headers={"Content-Type": "application/json"},
            )

    @pytest.mark.asyncio
    async def test_send_rejected(self) -> None:
        """Test that an error status is a failed delivery."""
        channel = DiscordWebhookChannel(WEBHOOK_URL)

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_response = MagicMock()
            mock_response.status_code = 400
            mock_response.is_success = False
            mock_response.text = "Bad Request"
            mock_client = mock_client_returning(mock_response)
            mock_client_class.return_value = mock_client

            result = await channel.send(PAYLOAD)

            assert result is False
            assert mock_client.post.call_count == 1

    @pytest.mark.asyncio
    async def test_send_timeout(self) -> None:
        """Test that a timeout is a failed delivery."""
        channel = DiscordWebhookChannel(WEBHOOK_URL)

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_client_returning(None)
            mock_client.post.side_effect = httpx.ReadTimeout("timed out")
            mock_client_class.return_value = mock_client

            assert await channel.send(PAYLOAD) is False

    @pytest.mark.asyncio
    async def test_send_connection_error(self) -> None:
        """Test that transport errors are a failed delivery."""
        channel = DiscordWebhookChannel(WEBHOOK_URL)

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_client_returning(None)
            mock_client.post.side_effect = httpx.ConnectError("refused")
            mock_client_class.return_value = mock_client

            assert await channel.send(PAYLOAD) is False
