"""RabbitMQ sources: AMQP queue reader and management HTTP API client."""

from __future__ import annotations

from .connection import RabbitMQConnectionManager
from .management import ManagementApiClient
from .reader import RabbitMQQueueReader, to_delivered_message
from .service import QueueService

__all__ = [
    "ManagementApiClient",
    "QueueService",
    "RabbitMQConnectionManager",
    "RabbitMQQueueReader",
    "to_delivered_message",
]
