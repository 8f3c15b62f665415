"""Unit tests for RabbitMQConnectionManager with mocked aio_pika (no real broker)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from aio_pika.exceptions import AMQPConnectionError

from snoop_messaging.exceptions import MessagingConnectionError
from snoop_messaging.rabbitmq.connection import RabbitMQConnectionManager


@pytest.fixture
def mock_connection() -> MagicMock:
    connection = MagicMock()
    connection.is_closed = False
    connection.close = AsyncMock()
    channel = MagicMock()
    channel.is_closed = False
    channel.close = AsyncMock()
    connection.channel = AsyncMock(return_value=channel)
    return connection


@pytest.mark.asyncio
async def test_connect_is_idempotent(mock_connection: MagicMock, rabbitmq_url: str) -> None:
    with patch(
        "aio_pika.connect_robust", AsyncMock(return_value=mock_connection)
    ) as connect:
        manager = RabbitMQConnectionManager(rabbitmq_url, timeout=5)
        assert await manager.connect() is mock_connection
        assert await manager.connect() is mock_connection
    connect.assert_awaited_once_with(rabbitmq_url, timeout=5)


@pytest.mark.asyncio
async def test_connect_failure_is_wrapped() -> None:
    with (
        patch("aio_pika.connect_robust", AsyncMock(side_effect=OSError("refused"))),
        pytest.raises(MessagingConnectionError) as exc_info,
    ):
        await RabbitMQConnectionManager().connect()
    assert "refused" in str(exc_info.value)
    assert exc_info.value.__cause__ is not None


@pytest.mark.asyncio
async def test_connect_amqp_failure_is_wrapped() -> None:
    with (
        patch(
            "aio_pika.connect_robust",
            AsyncMock(side_effect=AMQPConnectionError("auth failed")),
        ),
        pytest.raises(MessagingConnectionError),
    ):
        await RabbitMQConnectionManager().connect()


@pytest.mark.asyncio
async def test_channel_is_closed_after_block(mock_connection: MagicMock) -> None:
    with patch("aio_pika.connect_robust", AsyncMock(return_value=mock_connection)):
        manager = RabbitMQConnectionManager()
        async with manager.channel() as channel:
            assert channel is mock_connection.channel.return_value
    channel.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_already_closed_channel_not_closed_again(
    mock_connection: MagicMock,
) -> None:
    with patch("aio_pika.connect_robust", AsyncMock(return_value=mock_connection)):
        async with RabbitMQConnectionManager().channel() as channel:
            channel.is_closed = True
    channel.close.assert_not_awaited()


@pytest.mark.asyncio
async def test_health_check_and_close(mock_connection: MagicMock) -> None:
    with patch("aio_pika.connect_robust", AsyncMock(return_value=mock_connection)):
        manager = RabbitMQConnectionManager()
        assert await manager.health_check() is False
        async with manager:
            assert await manager.health_check() is True
    mock_connection.close.assert_awaited_once()
    assert await manager.health_check() is False
