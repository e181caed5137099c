"""Helpers for reading query results in tests and tools."""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any


def _format_float(value: float) -> str:
    """Format a float with the shortest digits, as in %g with exponent at 1e+06."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    count = len(digits)
    point = count + exponent
    prefix = "-" if sign else ""

    exp = point - 1
    if exp < -4 or exp >= 6:
        mantissa = digits[0] + ("." + digits[1:] if count > 1 else "")
        return f"{prefix}{mantissa}e{'-' if exp < 0 else '+'}{abs(exp):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= count:
        return f"{prefix}{digits}{'0' * (point - count)}"
    return f"{prefix}{digits[:point]}.{digits[point:]}"


def _as_text(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def row_content(cursor: Any) -> tuple[int, list[list[str]]]:
    """Read every remaining row of an executed DB-API cursor as text.

    Returns the column count and the rows, with SQL NULL shown as "NULL".
    """
    description = cursor.description or ()
    contents = [[_as_text(value) for value in row] for row in cursor]
    return len(description), contents