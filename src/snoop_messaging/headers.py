"""HeaderNormalizer: flatten basic properties and raw headers into text."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .conventions import (
    CONTENT_ENCODING,
    CONTENT_TYPE,
    CORRELATION_ID,
    MESSAGE_ID,
    TIMESTAMP,
)

if TYPE_CHECKING:
    from .raw import MessageProperties


def header_value_to_str(value: Any) -> str:
    """Render a raw header value as text.

    Bytes are decoded as UTF-8, text passes through, ``None`` becomes an empty
    string. Structured values from the management API (objects, arrays) are
    rendered as JSON; everything else uses ``str()``.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)


def format_epoch_seconds(seconds: int) -> str:
    """ISO-8601 with offset, in UTC."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()


class HeaderNormalizer:
    """Merge transport properties and bus-convention headers into one flat map.

    Raw headers are copied first; non-empty properties then overwrite the
    canonical keys. Absent fields are omitted, never fatal.
    """

    def normalize(self, properties: MessageProperties) -> dict[str, str]:
        headers = {
            str(key): header_value_to_str(value)
            for key, value in properties.headers.items()
        }

        for key, value in (
            (CONTENT_TYPE, properties.content_type),
            (CONTENT_ENCODING, properties.content_encoding),
            (MESSAGE_ID, properties.message_id),
            (CORRELATION_ID, properties.correlation_id),
        ):
            if value:
                headers[key] = value

        if properties.timestamp is not None and properties.timestamp > 0:
            try:
                headers[TIMESTAMP] = format_epoch_seconds(properties.timestamp)
            except (ValueError, OverflowError, OSError):
                # Out of datetime range, e.g. milliseconds sent as seconds
                pass

        return headers
