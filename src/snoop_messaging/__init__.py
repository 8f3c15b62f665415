"""Decode RabbitMQ / Rebus queue messages into a human-inspectable form."""

from __future__ import annotations

from .body import BodyDecoder
from .decoder import MessageDecoder
from .exceptions import (
    InfrastructureError,
    ManagementApiError,
    MessageDecodingError,
    MessagingConnectionError,
    MessagingError,
    SnoopError,
)
from .formatting import PayloadFormatter
from .headers import HeaderNormalizer
from .models import DecodedMessage, MessageHeader, QueueInfo
from .raw import DeliveredMessage, MessageProperties, RawMessage, SnapshotMessage

__all__ = [
    "BodyDecoder",
    "DecodedMessage",
    "DeliveredMessage",
    "HeaderNormalizer",
    "InfrastructureError",
    "ManagementApiError",
    "MessageDecoder",
    "MessageDecodingError",
    "MessageHeader",
    "MessageProperties",
    "MessagingConnectionError",
    "MessagingError",
    "PayloadFormatter",
    "QueueInfo",
    "RawMessage",
    "SnapshotMessage",
    "SnoopError",
]
