"""MessageDecoder: raw broker message to ``DecodedMessage``.

Drives header normalization, body decoding and payload formatting for either
raw shape. ``decode`` never raises; an undecodable message yields ``None``.
"""

from __future__ import annotations

import hashlib
import logging
import re
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .body import BodyDecoder
from .conventions import (
    ERROR_DETAILS,
    MESSAGE_TYPE,
    SENT_TIME,
    SOURCE_QUEUE,
    TIMESTAMP,
    UNKNOWN,
)
from .exceptions import MessageDecodingError
from .headers import HeaderNormalizer
from .models import DecodedMessage, MessageHeader
from .raw import DeliveredMessage, SnapshotMessage, raw_message_adapter

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

_FRACTION = re.compile(r"\.(\d+)")
_SHORT_OFFSET = re.compile(r"([+-]\d{2})$")
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def display_id(message_id: str) -> int:
    """Stable signed 64-bit display key for *message_id*."""
    digest = hashlib.blake2b(message_id.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big", signed=True)


def parse_timestamp(text: str) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Accepts a trailing ``Z``, more than six fractional digits (.NET writes
    seven) and hour-only or compact offsets. Returns ``None`` when unparsable.
    """
    value = text.strip()
    if not value:
        return None
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    if "T" in value or " " in value:
        value = _SHORT_OFFSET.sub(r"\1:00", value)
        value = _COMPACT_OFFSET.sub(r"\1:\2", value)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class MessageDecoder:
    """Decode raw messages from either source shape.

    Safe to share across tasks and threads; it holds no mutable state.
    """

    def __init__(
        self,
        *,
        normalizer: HeaderNormalizer | None = None,
        body_decoder: BodyDecoder | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Configure decoder.

        Args:
            normalizer: Header normalizer; default HeaderNormalizer().
            body_decoder: Body decoder; default BodyDecoder().
            clock: Returns the current time, used when no sent time is known.
        """
        self._normalizer = normalizer or HeaderNormalizer()
        self._body_decoder = body_decoder or BodyDecoder()
        self._clock = clock or _utc_now

    def decode(
        self, raw: DeliveredMessage | SnapshotMessage | Mapping[str, Any]
    ) -> DecodedMessage | None:
        """Return the decoded message, or None if it cannot be displayed.

        Mappings are validated against the raw shapes using their ``source`` tag.
        """
        try:
            return self._decode(raw)
        except Exception:  # noqa: BLE001
            logger.warning("Dropping message that could not be decoded", exc_info=True)
            return None

    def decode_many(
        self, raws: Iterable[DeliveredMessage | SnapshotMessage | Mapping[str, Any]]
    ) -> list[DecodedMessage]:
        """Decode a batch, omitting messages that cannot be displayed."""
        decoded = []
        for raw in raws:
            message = self.decode(raw)
            if message is not None:
                decoded.append(message)
        return decoded

    def parse_sent_time(self, headers: Mapping[str, str]) -> datetime:
        """Resolve when the message was sent.

        Tries the bus sent-time header, then the same value cut at its last
        colon, then the transport timestamp, then the clock.
        """
        sent_time = headers.get(SENT_TIME)
        if sent_time is not None:
            parsed = parse_timestamp(sent_time)
            if parsed is None and ":" in sent_time:
                parsed = parse_timestamp(sent_time[: sent_time.rindex(":")])
            if parsed is not None:
                return parsed

        timestamp = headers.get(TIMESTAMP)
        if timestamp is not None:
            parsed = parse_timestamp(timestamp)
            if parsed is not None:
                return parsed

        return self._clock()

    def _decode(
        self, raw: DeliveredMessage | SnapshotMessage | Mapping[str, Any]
    ) -> DecodedMessage:
        if isinstance(raw, Mapping):
            raw = raw_message_adapter.validate_python(raw)
        if not isinstance(raw, (DeliveredMessage, SnapshotMessage)):
            raise MessageDecodingError(
                f"Unsupported raw message type: {type(raw).__name__}"
            )

        payload = raw.to_payload()
        message_id = payload.properties.message_id or str(uuid.uuid4())
        headers = self._normalizer.normalize(payload.properties)

        # Rebus may list several assembly-qualified candidates; the first wins
        message_type = headers.get(MESSAGE_TYPE, UNKNOWN).split(",")[0].strip()
        if SOURCE_QUEUE in headers:
            source_queue = headers[SOURCE_QUEUE]
        else:
            source_queue = payload.routing_key or UNKNOWN

        return DecodedMessage(
            id=display_id(message_id),
            message_id=message_id,
            headers=tuple(
                MessageHeader(key=key, value=value)
                for key, value in headers.items()
                if key != ERROR_DETAILS
            ),
            message_type=message_type or UNKNOWN,
            source_queue=source_queue,
            sent_time=self.parse_sent_time(headers),
            body=self._body_decoder.decode(payload.payload, headers),
            error_details=headers.get(ERROR_DETAILS),
        )
