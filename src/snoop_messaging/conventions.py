"""Well-known header keys and fixed texts shared by the decoding pipeline.

The ``rbs2-*`` keys belong to the Rebus bus convention layered on top of
RabbitMQ. They are part of the wire contract and must match exactly.
"""

from __future__ import annotations

# Bus-convention headers
MESSAGE_TYPE = "rbs2-msg-type"
SOURCE_QUEUE = "rbs2-source-queue"
SENT_TIME = "rbs2-sent-time"
ERROR_DETAILS = "rbs2-error-details"
CONTENT_TYPE = "rbs2-content-type"
CONTENT_ENCODING = "rbs2-content-encoding"

# Keys derived from AMQP basic properties
MESSAGE_ID = "message-id"
CORRELATION_ID = "correlation-id"
TIMESTAMP = "timestamp"

# Plain transport spellings, consulted when the bus-convention key is absent
PLAIN_CONTENT_TYPE = "content-type"
PLAIN_CONTENT_ENCODING = "content-encoding"

UNKNOWN = "Unknown"
EMPTY_BODY = "Empty message body"
BODY_ERROR_PREFIX = "Error decoding message body: "

DEFAULT_MAX_MESSAGES = 100
