"""Writing query results to a stream in several output formats."""

from __future__ import annotations

import base64
import itertools
import json
import os
from typing import Any, Iterable, TextIO

from mergelite.tools import _as_text

_DEFAULT_WIDTH = 500
_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def write_to(cursor: Any, stream: TextIO, fmt: str = "table", interactive: bool = False) -> None:
    """Write every remaining row of an executed DB-API cursor to ``stream``.

    ``fmt`` is one of single, csv, csv-noheader, tsv, tsv-noheader, json or
    ndjson; anything else renders a text table. A table is cut to the
    terminal width unless ``interactive`` is true.
    """
    columns = [description[0] for description in cursor.description or ()]
    match fmt:
        case "single":
            _write_single(cursor, columns, stream)
        case "csv":
            _write_delimited(cursor, columns, ",", True, stream)
        case "csv-noheader":
            _write_delimited(cursor, columns, ",", False, stream)
        case "tsv":
            _write_delimited(cursor, columns, "\t", True, stream)
        case "tsv-noheader":
            _write_delimited(cursor, columns, "\t", False, stream)
        case "json":
            stream.write(_to_json([_row_dict(columns, row) for row in cursor]))
        case "ndjson":
            for row in cursor:
                stream.write(_to_json(_row_dict(columns, row)) + "\n")
        case _:
            _write_table(cursor, columns, stream, overflow=interactive)


def _cell(value: Any) -> str | None:
    return None if value is None else _as_text(value)


def _write_single(cursor: Any, columns: list[str], stream: TextIO) -> None:
    row = cursor.fetchone()
    if row is None:
        raise ValueError("query returned no rows")
    if not columns or not row:
        raise ValueError("query returned no columns")
    stream.write(_cell(row[0]) or "")


def _csv_needs_quotes(field: str, comma: str) -> bool:
    if field == "":
        return False
    if field == "\\.":
        return True
    if comma in field or any(special in field for special in '"\r\n'):
        return True
    return field[0].isspace()


def _csv_field(field: str, comma: str) -> str:
    if not _csv_needs_quotes(field, comma):
        return field
    return '"' + field.replace('"', '""') + '"'


def _csv_line(fields: Iterable[str], comma: str) -> str:
    return comma.join(_csv_field(field, comma) for field in fields) + "\n"


def _write_delimited(
    cursor: Any, columns: list[str], comma: str, header: bool, stream: TextIO
) -> None:
    if header:
        stream.write(_csv_line(columns, comma))
    for row in cursor:
        stream.write(_csv_line((_cell(value) or "" for value in row), comma))


def _json_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return value


def _row_dict(columns: list[str], row: Iterable[Any]) -> dict[str, Any]:
    return {column: _json_value(value) for column, value in zip(columns, row)}


def _to_json(value: Any) -> str:
    text = json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in _JSON_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def _terminal_width() -> int:
    try:
        return os.get_terminal_size(0).columns
    except (OSError, ValueError):
        return _DEFAULT_WIDTH


def _write_table(cursor: Any, columns: list[str], stream: TextIO, overflow: bool) -> None:
    rows = [["NULL" if value is None else _as_text(value) for value in row] for row in cursor]
    if not columns:
        return
    max_width = None if overflow else _terminal_width()

    table = [[name.upper() for name in columns], *rows]
    cells = [[text.split("\n") for text in row] for row in table]
    widths = [
        max(len(line) for row in cells for line in row[index])
        for index in range(len(columns))
    ]
    border = "+" + "+".join("-" * (width + 2) for width in widths) + "+"

    lines = [border]
    for row in cells:
        for parts in itertools.zip_longest(*row, fillvalue=""):
            lines.append(
                "|" + "|".join(f" {part:<{width}} " for part, width in zip(parts, widths)) + "|"
            )
        lines.append(border)

    for line in lines:
        if max_width is not None and max_width > 0 and len(line) > max_width:
            line = line[: max_width - 1] + "~"
        stream.write(line + "\n")