"""Decoded records handed to the view layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .conventions import UNKNOWN


class MessageHeader(BaseModel):
    """One normalized header as a key/value pair."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str


class DecodedMessage(BaseModel):
    """Immutable, displayable form of one broker message.

    ``id`` is a display key derived from ``message_id``; collisions are
    possible, so use ``message_id`` where a stable identity is needed.
    ``visible_time`` and ``expiration_time`` are always ``None`` for RabbitMQ
    and exist for parity with brokers that have those concepts.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    message_id: str
    headers: tuple[MessageHeader, ...] = ()
    message_type: str = UNKNOWN
    source_queue: str
    sent_time: datetime
    visible_time: datetime | None = None
    expiration_time: datetime | None = None
    body: str
    error_details: str | None = None

    def header_map(self) -> dict[str, str]:
        return {header.key: header.value for header in self.headers}


class QueueInfo(BaseModel):
    """Queue summary from ``GET /api/queues``."""

    model_config = ConfigDict(frozen=True)

    name: str
    vhost: str = "/"
    messages: int = Field(default=0, ge=0)
    consumers: int = Field(default=0, ge=0)

    @field_validator("messages", "consumers", mode="before")
    @classmethod
    def _missing_count_as_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    def __str__(self) -> str:
        return f"{self.name} ({self.messages} messages, {self.consumers} consumers)"
