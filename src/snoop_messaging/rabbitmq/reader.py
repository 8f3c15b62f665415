"""RabbitMQQueueReader: peek at queued messages over AMQP without consuming them."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aio_pika.exceptions import AMQPError
from pydantic import ValidationError

from ..conventions import DEFAULT_MAX_MESSAGES
from ..decoder import MessageDecoder
from ..exceptions import MessagingError
from ..raw import DeliveredMessage, MessageProperties

if TYPE_CHECKING:
    from aio_pika.abc import AbstractIncomingMessage

    from ..models import DecodedMessage
    from .connection import RabbitMQConnectionManager

logger = logging.getLogger(__name__)


def to_delivered_message(message: AbstractIncomingMessage) -> DeliveredMessage:
    """Build the live-delivery shape from an aio_pika incoming message."""
    return DeliveredMessage(
        routing_key=message.routing_key or "",
        body=message.body,
        properties=MessageProperties(
            content_type=message.content_type,
            content_encoding=message.content_encoding,
            message_id=message.message_id,
            correlation_id=message.correlation_id,
            timestamp=message.timestamp,
            headers=dict(message.headers or {}),
        ),
    )


class RabbitMQQueueReader:
    """Reads up to ``max_messages`` with ``basic.get`` and puts them all back.

    Messages are held unacknowledged while the batch is collected and then
    rejected with requeue, so the queue keeps its contents (redelivered
    messages are flagged as such by the broker).
    """

    def __init__(
        self,
        connection: RabbitMQConnectionManager,
        *,
        decoder: MessageDecoder | None = None,
        max_messages: int = DEFAULT_MAX_MESSAGES,
    ) -> None:
        """Configure reader.

        Args:
            connection: Shared connection manager.
            decoder: Used to decode each message; default MessageDecoder().
            max_messages: Default batch size for peek().
        """
        if max_messages < 1:
            raise ValueError("max_messages must be >= 1")
        self._connection = connection
        self._decoder = decoder or MessageDecoder()
        self._max_messages = max_messages

    async def peek(
        self, queue_name: str, max_messages: int | None = None
    ) -> list[DecodedMessage]:
        """Return decoded copies of the first messages in *queue_name*.

        Raises:
            ValueError: If *max_messages* is less than 1.
            MessagingError: If the queue does not exist or the channel fails.
        """
        limit = self._max_messages if max_messages is None else max_messages
        if limit < 1:
            raise ValueError("max_messages must be >= 1")
        held: list[AbstractIncomingMessage] = []
        async with self._connection.channel() as channel:
            try:
                queue = await channel.declare_queue(queue_name, passive=True)
                while len(held) < limit:
                    incoming = await queue.get(no_ack=False, fail=False)
                    if incoming is None:
                        break
                    held.append(incoming)
            except AMQPError as e:
                raise MessagingError(f"Cannot read queue {queue_name!r}: {e}") from e
            finally:
                # A closed channel already returned its unacked messages
                if not channel.is_closed:
                    for incoming in held:
                        await incoming.reject(requeue=True)

        logger.debug(f"Peeked {len(held)} message(s) from {queue_name}")
        return self._decoder.decode_many(self._to_raw(held))

    @staticmethod
    def _to_raw(
        messages: list[AbstractIncomingMessage],
    ) -> list[DeliveredMessage]:
        raws = []
        for message in messages:
            try:
                raws.append(to_delivered_message(message))
            except ValidationError:
                logger.warning(
                    f"Skipping message with unusable properties: {message.message_id}",
                    exc_info=True,
                )
        return raws
