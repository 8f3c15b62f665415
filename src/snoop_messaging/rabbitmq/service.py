"""QueueService: failure-tolerant facade over the management API for a view layer."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..body import with_charset
from ..conventions import (
    BODY_ERROR_PREFIX,
    CONTENT_ENCODING,
    CONTENT_TYPE,
    DEFAULT_MAX_MESSAGES,
    EMPTY_BODY,
    PLAIN_CONTENT_ENCODING,
    PLAIN_CONTENT_TYPE,
)
from ..exceptions import MessagingError

if TYPE_CHECKING:
    from ..models import DecodedMessage, QueueInfo
    from .management import ManagementApiClient

logger = logging.getLogger(__name__)


class QueueService:
    """Browse, purge and re-route queues.

    Upstream failures are logged and collapse to an empty list or False so the
    caller can keep rendering.
    """

    def __init__(self, client: ManagementApiClient) -> None:
        self._client = client

    async def get_queues(self) -> list[QueueInfo]:
        try:
            return await self._client.get_queues()
        except MessagingError as e:
            logger.error(f"Failed to list queues: {e}")
            return []

    async def get_messages(
        self, queue_name: str, max_messages: int = DEFAULT_MAX_MESSAGES
    ) -> list[DecodedMessage]:
        try:
            return await self._client.get_messages(queue_name, max_messages)
        except MessagingError as e:
            logger.error(f"Failed to load messages from {queue_name}: {e}")
            return []

    async def purge_queue(self, queue_name: str) -> bool:
        try:
            await self._client.purge_queue(queue_name)
        except MessagingError as e:
            logger.error(f"Failed to purge {queue_name}: {e}")
            return False
        return True

    async def delete_message(self, queue_name: str, message_id: str) -> bool:
        """Delete a message by purging its queue.

        RabbitMQ cannot remove a single message by id, so the whole queue goes.
        """
        logger.info(f"Purging {queue_name} to delete message {message_id}")
        return await self.purge_queue(queue_name)

    async def return_to_source_queue(
        self, error_queue: str, message: DecodedMessage
    ) -> bool:
        """Republish *message* to its source queue.

        The body goes out as UTF-8 text, so compression markers are dropped and
        any charset is rewritten to utf-8. Messages whose body is a placeholder
        or a decoding diagnostic are refused. The copy in *error_queue* is left
        in place.
        """
        if message.source_queue == error_queue:
            return False
        if message.body == EMPTY_BODY or message.body.startswith(BODY_ERROR_PREFIX):
            logger.warning(
                f"Not returning {message.message_id}: its original body is unavailable"
            )
            return False

        headers = {}
        for key, value in message.header_map().items():
            if key in (CONTENT_ENCODING, PLAIN_CONTENT_ENCODING):
                continue
            if key in (CONTENT_TYPE, PLAIN_CONTENT_TYPE):
                value = with_charset(value, "utf-8")
            headers[key] = value
        content_type = headers.get(CONTENT_TYPE) or headers.get(
            PLAIN_CONTENT_TYPE, "application/json"
        )
        try:
            return await self._client.publish(
                message.source_queue,
                message.body,
                headers=headers,
                content_type=content_type,
            )
        except MessagingError as e:
            logger.error(
                f"Failed to return {message.message_id} to {message.source_queue}: {e}"
            )
            return False

    async def return_all_to_source_queue(
        self, error_queue: str, max_messages: int = DEFAULT_MAX_MESSAGES
    ) -> int:
        """Republish every loaded message; returns how many were routed."""
        returned = 0
        for message in await self.get_messages(error_queue, max_messages):
            if await self.return_to_source_queue(error_queue, message):
                returned += 1
        return returned
