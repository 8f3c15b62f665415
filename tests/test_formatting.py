"""Tests for PayloadFormatter."""

from __future__ import annotations

import json

import pytest

from snoop_messaging.formatting import PayloadFormatter


@pytest.fixture
def formatter() -> PayloadFormatter:
    return PayloadFormatter()


@pytest.mark.parametrize(
    "text",
    [
        '{"b":2,"a":{"nested":[1,2,{"x":null}]}}',
        '[{"id":1},{"id":2}]',
        '{"unicode":"Grüße","empty":{},"list":[]}',
        "[]",
    ],
)
def test_structure_preserved(formatter: PayloadFormatter, text: str) -> None:
    formatted = formatter.format(text)
    assert json.loads(formatted) == json.loads(text)


def test_object_is_indented_in_encounter_order(formatter: PayloadFormatter) -> None:
    assert formatter.format('{"b":1,"a":2}') == '{\n  "b": 1,\n  "a": 2\n}'


def test_array_is_indented(formatter: PayloadFormatter) -> None:
    assert formatter.format("[1,2]") == "[\n  1,\n  2\n]"


def test_non_ascii_kept_verbatim(formatter: PayloadFormatter) -> None:
    assert '"Grüße"' in formatter.format('{"greeting":"Grüße"}')


@pytest.mark.parametrize(
    "text", ["hello", "42", '"just a string"', "true", "null", "{not json", ""]
)
def test_non_structured_text_unchanged(formatter: PayloadFormatter, text: str) -> None:
    assert formatter.format(text) == text


def test_custom_indent() -> None:
    assert PayloadFormatter(indent=4).format('{"a":1}') == '{\n    "a": 1\n}'


@pytest.mark.parametrize(
    "text", ['{"a": 1e400}', "[-1e400]", '{"a": NaN}', "[Infinity]"]
)
def test_non_finite_numbers_left_unchanged(
    formatter: PayloadFormatter, text: str
) -> None:
    assert formatter.format(text) == text


def test_finite_floats_still_formatted(formatter: PayloadFormatter) -> None:
    assert formatter.format('{"a":1.5e3}') == '{\n  "a": 1500.0\n}'
