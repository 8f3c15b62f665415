"""BodyDecoder: bytes to displayable text.

Decompresses gzip bodies, resolves the charset from the content type and hands
the text to a ``PayloadFormatter``. Every failure is rendered inline as a
diagnostic string; nothing raises past ``BodyDecoder.decode``.
"""

from __future__ import annotations

import base64
import codecs
import gzip
import logging
from typing import TYPE_CHECKING

from .conventions import (
    BODY_ERROR_PREFIX,
    CONTENT_ENCODING,
    CONTENT_TYPE,
    EMPTY_BODY,
    PLAIN_CONTENT_ENCODING,
    PLAIN_CONTENT_TYPE,
)
from .formatting import PayloadFormatter

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf-8"


def _header(headers: Mapping[str, str], key: str, fallback_key: str) -> str | None:
    if key in headers:
        return headers[key]
    return headers.get(fallback_key)


def content_type_parameters(content_type: str | None) -> dict[str, str]:
    """Parse ``;``-separated ``key=value`` tokens; keys are case-insensitive."""
    parameters: dict[str, str] = {}
    for token in (content_type or "").split(";"):
        parts = token.split("=")
        if len(parts) == 2:
            parameters[parts[0].strip().lower()] = parts[1].strip()
    return parameters


def with_charset(content_type: str, charset: str) -> str:
    """Replace the ``charset`` parameter of *content_type*, if it has one."""
    tokens = []
    for token in content_type.split(";"):
        parts = token.split("=")
        if len(parts) == 2 and parts[0].strip().lower() == "charset":
            indent = token[: len(token) - len(token.lstrip())]
            token = f"{indent}charset={charset}"
        tokens.append(token)
    return ";".join(tokens)


def resolve_charset(content_type: str | None) -> str:
    """Return the codec name for the ``charset`` parameter, UTF-8 by default.

    Raises:
        LookupError: If the charset names no known codec.
    """
    parameters = content_type_parameters(content_type)
    if "charset" not in parameters:
        return DEFAULT_CHARSET
    return codecs.lookup(parameters["charset"].strip('"')).name


def is_gzipped(headers: Mapping[str, str]) -> bool:
    encoding = _header(headers, CONTENT_ENCODING, PLAIN_CONTENT_ENCODING)
    return encoding is not None and encoding.strip().lower() == "gzip"


class BodyDecoder:
    """Turn a message payload into display text."""

    def __init__(self, formatter: PayloadFormatter | None = None) -> None:
        self._formatter = formatter or PayloadFormatter()

    def decode(self, payload: bytes | str | None, headers: Mapping[str, str]) -> str:
        """Decode *payload* using the normalized *headers*.

        A ``str`` payload is base64 (the management API snapshot form).
        """
        if not payload:
            return EMPTY_BODY
        try:
            data = (
                base64.b64decode(payload, validate=True)
                if isinstance(payload, str)
                else payload
            )
            if not data:
                return EMPTY_BODY
            if is_gzipped(headers):
                data = gzip.decompress(data)
            charset = resolve_charset(_header(headers, CONTENT_TYPE, PLAIN_CONTENT_TYPE))
            text = data.decode(charset)
            return self._formatter.format(text)
        except Exception as e:  # noqa: BLE001
            logger.debug("Failed to decode message body", exc_info=True)
            return f"{BODY_ERROR_PREFIX}{e}"
