"""Tests for HeaderNormalizer."""

from __future__ import annotations

from datetime import datetime, timezone

from snoop_messaging.conventions import (
    CONTENT_ENCODING,
    CONTENT_TYPE,
    CORRELATION_ID,
    MESSAGE_ID,
    TIMESTAMP,
)
from snoop_messaging.headers import HeaderNormalizer, header_value_to_str
from snoop_messaging.raw import MessageProperties


def test_header_value_to_str_variants() -> None:
    assert header_value_to_str(b"rebus") == "rebus"
    assert header_value_to_str(bytearray("ø", "utf-8")) == "ø"
    assert header_value_to_str("text") == "text"
    assert header_value_to_str(None) == ""
    assert header_value_to_str(42) == "42"
    assert header_value_to_str(True) == "True"
    assert header_value_to_str({"a": 1}) == '{"a": 1}'
    assert header_value_to_str([1, "x"]) == '[1, "x"]'


def test_invalid_utf8_bytes_do_not_raise() -> None:
    assert header_value_to_str(b"\xff\xfe") == "��"


def test_raw_headers_are_copied() -> None:
    props = MessageProperties(
        headers={"rbs2-msg-type": b"Orders.Placed, Orders", "x-retries": 3, "empty": None}
    )
    headers = HeaderNormalizer().normalize(props)
    assert headers == {
        "rbs2-msg-type": "Orders.Placed, Orders",
        "x-retries": "3",
        "empty": "",
    }


def test_properties_overwrite_raw_headers() -> None:
    props = MessageProperties(
        content_type="application/json;charset=utf-8",
        content_encoding="gzip",
        message_id="m-1",
        correlation_id="c-1",
        headers={CONTENT_TYPE: "text/plain", MESSAGE_ID: "stale"},
    )
    headers = HeaderNormalizer().normalize(props)
    assert headers[CONTENT_TYPE] == "application/json;charset=utf-8"
    assert headers[CONTENT_ENCODING] == "gzip"
    assert headers[MESSAGE_ID] == "m-1"
    assert headers[CORRELATION_ID] == "c-1"


def test_empty_properties_are_omitted() -> None:
    props = MessageProperties(content_type="", message_id=None, headers={"a": "b"})
    assert HeaderNormalizer().normalize(props) == {"a": "b"}


def test_timestamp_formatted_as_iso_with_offset() -> None:
    props = MessageProperties(timestamp=1_700_000_000)
    headers = HeaderNormalizer().normalize(props)
    assert headers[TIMESTAMP] == "2023-11-14T22:13:20+00:00"
    assert datetime.fromisoformat(headers[TIMESTAMP]) == datetime.fromtimestamp(
        1_700_000_000, tz=timezone.utc
    )


def test_zero_timestamp_is_ignored() -> None:
    assert TIMESTAMP not in HeaderNormalizer().normalize(MessageProperties(timestamp=0))


def test_datetime_timestamp_is_accepted() -> None:
    props = MessageProperties(timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc))
    assert props.timestamp == 1_704_067_200
    assert HeaderNormalizer().normalize(props)[TIMESTAMP] == "2024-01-01T00:00:00+00:00"


def test_out_of_range_timestamp_is_omitted() -> None:
    # Milliseconds published where seconds are expected
    props = MessageProperties(timestamp=1_700_000_000_000, headers={"a": "b"})
    assert HeaderNormalizer().normalize(props) == {"a": "b"}
