"""Raw message shapes: live deliveries and management API snapshots.

Both shapes translate into one ``RawPayload`` so the rest of the pipeline
never needs to know where a message came from.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class MessageProperties(BaseModel):
    """AMQP basic properties that take part in decoding."""

    model_config = ConfigDict(frozen=True)

    content_type: str | None = None
    content_encoding: str | None = None
    message_id: str | None = None
    correlation_id: str | None = None
    timestamp: int | None = Field(default=None, description="Epoch seconds")
    headers: dict[str, Any] = Field(default_factory=dict)

    @field_validator(
        "content_type", "content_encoding", "message_id", "correlation_id", mode="before"
    )
    @classmethod
    def _scalar_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("timestamp", mode="before")
    @classmethod
    def _timestamp_as_epoch_seconds(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            return int(value.timestamp())
        return value

    @field_validator("headers", mode="before")
    @classmethod
    def _missing_headers_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value


@dataclass(frozen=True)
class RawPayload:
    """Common intermediate: properties, payload and routing key.

    ``payload`` is raw bytes, or a base64 string still to be decoded.
    """

    properties: MessageProperties
    payload: bytes | str | None
    routing_key: str | None = None


class DeliveredMessage(BaseModel):
    """A message handed over by a broker client (``basic.get`` / ``basic.deliver``)."""

    model_config = ConfigDict(frozen=True)

    source: Literal["delivery"] = "delivery"
    routing_key: str
    body: bytes = b""
    properties: MessageProperties = Field(default_factory=MessageProperties)

    def to_payload(self) -> RawPayload:
        return RawPayload(
            properties=self.properties,
            payload=self.body,
            routing_key=self.routing_key,
        )


class SnapshotMessage(BaseModel):
    """A message as returned by ``POST /api/queues/{vhost}/{queue}/get``."""

    model_config = ConfigDict(frozen=True)

    source: Literal["snapshot"] = "snapshot"
    routing_key: str | None = None
    payload: str | None = None
    payload_encoding: str = "base64"
    properties: MessageProperties = Field(default_factory=MessageProperties)

    @field_validator("properties", mode="before")
    @classmethod
    def _empty_properties(cls, value: Any) -> Any:
        # The management API renders empty properties as [] rather than {}
        if value is None or value == []:
            return {}
        return value

    def to_payload(self) -> RawPayload:
        payload: bytes | str | None = self.payload
        if self.payload and self.payload_encoding == "string":
            payload = self.payload.encode("utf-8")
        return RawPayload(
            properties=self.properties,
            payload=payload,
            routing_key=self.routing_key,
        )


RawMessage = Annotated[
    DeliveredMessage | SnapshotMessage,
    Field(discriminator="source"),
]

raw_message_adapter: TypeAdapter[DeliveredMessage | SnapshotMessage] = TypeAdapter(
    RawMessage
)
