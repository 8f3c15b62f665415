"""PayloadFormatter: pretty-print JSON bodies, pass anything else through."""

from __future__ import annotations

import json
import math


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {text}")
    return value


def _reject_constant(name: str) -> float:
    raise ValueError(f"Not a JSON value: {name}")


class PayloadFormatter:
    """Re-serialize JSON objects and arrays with indentation.

    Key order is kept as encountered. Text that is not a JSON object or array
    (including bare JSON scalars) is returned unchanged, as is JSON holding
    numbers that would not survive a float round trip (``1e400``, ``NaN``).
    """

    def __init__(self, *, indent: int = 2) -> None:
        self._indent = indent

    def format(self, text: str) -> str:
        try:
            value = json.loads(
                text, parse_float=_finite_float, parse_constant=_reject_constant
            )
        except (ValueError, RecursionError):
            return text
        if not isinstance(value, (dict, list)):
            return text
        return json.dumps(value, indent=self._indent, ensure_ascii=False)
