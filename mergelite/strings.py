"""String splitting and line searching."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class GrepMatch:
    """A matching line number (from 1) and the line with its surrounding context."""

    line_no: int
    line: str


def str_split(text: str, separator: str, index: int) -> str | None:
    """Split ``text`` on ``separator`` and return the part at ``index``.

    An empty separator splits into single characters. None is returned when
    ``index`` is past the last part.
    """
    if index < 0:
        raise IndexError(f"negative split index: {index}")
    parts = list(text) if separator == "" else text.split(separator)
    return parts[index] if index < len(parts) else None


def str_split_rows(contents: str, delimiter: str = "\n") -> Iterator[tuple[int, str]]:
    """Yield ``(line_no, part)`` for each part of ``contents`` split on ``delimiter``.

    Numbering starts at 1 and an empty delimiter means a newline. A trailing
    empty part is not produced, and after each delimiter the scan resumes
    one byte past where the delimiter began.
    """
    data = contents.encode("utf-8")
    separator = (delimiter or "\n").encode("utf-8")
    position = 0
    line_no = 0
    while position < len(data):
        found = data.find(separator, position)
        line_no += 1
        if found < 0:
            yield line_no, data[position:].decode("utf-8", errors="replace")
            return
        yield line_no, data[position:found].decode("utf-8", errors="replace")
        position = found + 1


def grep(
    contents: str, search: str, preceding: int = 0, following: int = 0
) -> Iterator[GrepMatch]:
    """Find the lines of ``contents`` that match the regular expression ``search``.

    Each match carries up to ``preceding`` lines before it and ``following``
    lines after it. An empty search or an invalid pattern raises at once.
    """
    if not search:
        raise ValueError("no search string provided")
    pattern = re.compile(search)
    return _grep_matches(contents.split("\n"), pattern, preceding, following)


def _grep_matches(
    lines: list[str], pattern: re.Pattern[str], preceding: int, following: int
) -> Iterator[GrepMatch]:
    last = len(lines) - 1
    for index, line in enumerate(lines):
        if pattern.search(line):
            start = max(0, index - preceding)
            end = min(last, index + following)
            yield GrepMatch(index + 1, "\n".join(lines[start : end + 1]))