"""Tests for the Socket Mode connection retry loop."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from briefops.slack.app import connect_with_retry, start_socket_mode, stop_socket_mode, watch_connection


class TestConnectWithRetry:
    """Fixed-interval reconnects, exit after the last attempt."""

    @pytest.mark.asyncio
    async def test_retries_until_connected(self):
        handler = MagicMock()
        handler.connect_async = AsyncMock(side_effect=[ConnectionError("down"), ConnectionError("down"), None])

        with patch("briefops.slack.app.asyncio.sleep", AsyncMock()) as sleep:
            await connect_with_retry(handler, max_retries=5, retry_interval=2.0)

        assert handler.connect_async.await_count == 3
        assert [call.args[0] for call in sleep.await_args_list] == [2.0, 2.0]

    @pytest.mark.asyncio
    async def test_exits_after_max_retries(self):
        handler = MagicMock()
        handler.connect_async = AsyncMock(side_effect=ConnectionError("down"))

        with patch("briefops.slack.app.asyncio.sleep", AsyncMock()) as sleep:
            with pytest.raises(SystemExit) as exc_info:
                await connect_with_retry(handler, max_retries=3, retry_interval=1.0)

        assert exc_info.value.code == 1
        assert handler.connect_async.await_count == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_stop_without_handler(self):
        await stop_socket_mode(None)


def socket_handler(connected: list[bool]) -> MagicMock:
    handler = MagicMock()
    handler.connect_async = AsyncMock()
    handler.client.is_connected = AsyncMock(side_effect=connected)
    return handler


class TestWatchConnection:
    """Drops after startup go through the same bounded policy."""

    @pytest.mark.asyncio
    async def test_reconnects_after_drop(self):
        handler = socket_handler([True, False])
        sleep = AsyncMock(side_effect=[None, None, asyncio.CancelledError()])

        with patch("briefops.slack.app.asyncio.sleep", sleep):
            with pytest.raises(asyncio.CancelledError):
                await watch_connection(handler, max_retries=3, retry_interval=1.0, check_interval=10.0)

        handler.connect_async.assert_awaited_once()
        assert [call.args[0] for call in sleep.await_args_list] == [10.0, 10.0, 10.0]

    @pytest.mark.asyncio
    async def test_exits_when_reconnect_fails(self):
        handler = socket_handler([False])
        handler.connect_async.side_effect = ConnectionError("down")

        with patch("briefops.slack.app.asyncio.sleep", AsyncMock()):
            with pytest.raises(SystemExit) as exc_info:
                await watch_connection(handler, max_retries=2, retry_interval=1.0)

        assert exc_info.value.code == 1
        assert handler.connect_async.await_count == 2

    @pytest.mark.asyncio
    async def test_start_disables_client_auto_reconnect(self):
        handler = MagicMock()
        handler.connect_async = AsyncMock()

        with patch("briefops.slack.app.AsyncSocketModeHandler", return_value=handler):
            result = await start_socket_mode(MagicMock(), "xapp-test")

        assert result is handler
        assert handler.client.auto_reconnect_enabled is False
        handler.connect_async.assert_awaited_once()
