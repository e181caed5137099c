"""Registration of the bundled helper SQL functions on a SQLite connection.

The table-valued helpers (grep and row-wise str_split) are available as
Python generators in mergelite.strings.
"""

from __future__ import annotations

import sqlite3
from typing import Any

from mergelite.converters import toml_to_json, xml_to_json, yaml_to_json
from mergelite.strings import str_split
from mergelite.timediff import approx_duration, time_diff


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _str_split(text: Any, separator: Any, index: Any) -> str | None:
    return str_split(_text(text), _text(separator), int(index or 0))


def _time_diff(*args: Any) -> str:
    return time_diff(*(_text(arg) for arg in args))


def _approx_dur(days: Any) -> str:
    return approx_duration(float(days or 0))


def register_helpers(connection: sqlite3.Connection) -> None:
    """Register str_split, the JSON converters, time_diff and approx_dur."""
    functions = [
        ("str_split", 3, _str_split, True),
        ("toml_to_json", 1, lambda v: toml_to_json(_text(v)), True),
        ("yaml_to_json", 1, lambda v: yaml_to_json(_text(v)), True),
        ("yml_to_json", 1, lambda v: yaml_to_json(_text(v)), True),
        ("xml_to_json", 1, lambda v: xml_to_json(_text(v)), True),
        ("time_diff", -1, _time_diff, False),
        ("approx_dur", 1, _approx_dur, True),
    ]
    for name, arity, function, deterministic in functions:
        connection.create_function(name, arity, function, deterministic=deterministic)