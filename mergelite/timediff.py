"""Human-readable descriptions of time differences and durations."""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Callable

_MINUTE = 60.0
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR
_MONTH = 30 * _DAY
_YEAR = 365 * _DAY

RFC3339 = "2006-01-02T15:04:05Z07:00"

_MONTH_NAMES = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]

_Formatter = Callable[[float], str]

_DEFAULT_FORMATTERS: list[tuple[float, _Formatter]] = [
    (44, lambda s: "a few seconds"),
    (89, lambda s: "a minute"),
    (44 * _MINUTE, lambda s: f"{math.ceil(s / _MINUTE)} minutes"),
    (89 * _MINUTE, lambda s: "an hour"),
    (21 * _HOUR, lambda s: f"{math.ceil(s / _HOUR)} hours"),
    (35 * _HOUR, lambda s: "a day"),
    (25 * _DAY, lambda s: f"{math.ceil(s / _DAY)} days"),
    (45 * _DAY, lambda s: "a month"),
    (10 * _MONTH, lambda s: f"{math.ceil(s / _MONTH)} months"),
    (17 * _MONTH, lambda s: "a year"),
    (math.inf, lambda s: f"{math.ceil(s / _YEAR)} years"),
]


def _round_half_away(value: float) -> int:
    return int(math.floor(value + 0.5)) if value >= 0 else -int(math.floor(-value + 0.5))


_APPROX_FORMATTERS: list[tuple[float, _Formatter]] = [
    (1, lambda s: "<none>"),
    (44, lambda s: "a few seconds"),
    (89, lambda s: "1 minute"),
    (44 * _MINUTE, lambda s: f"{math.ceil(s / _MINUTE)} minutes"),
    (89 * _MINUTE, lambda s: "1 hour"),
    (21 * _HOUR, lambda s: f"{math.ceil(s / _HOUR)} hours"),
    (35 * _HOUR, lambda s: "1 day"),
    (25 * _DAY, lambda s: f"{math.ceil(s / _DAY)} days"),
    (45 * _DAY, lambda s: "1 month"),
    (10 * _MONTH, lambda s: f"{math.ceil(s / _MONTH)} months"),
    (17 * _MONTH, lambda s: f"1 year ({_round_half_away(s / _MONTH)} months)"),
    (
        math.inf,
        lambda s: f"{math.ceil(s / (12 * _MONTH))} years ({_round_half_away(s / _MONTH)} months)",
    ),
]


def _apply(formatters: list[tuple[float, _Formatter]], seconds: float) -> str:
    for bound, formatter in formatters:
        if seconds <= bound:
            return formatter(seconds)
    return formatters[-1][1](seconds)


# Layout tokens in the order they are tried at each position.
_LAYOUT_TOKENS: list[tuple[str, str]] = [
    ("January", r"(?P<monthname>[A-Za-z]+)"),
    ("Jan", r"(?P<monthname>[A-Za-z]{3})"),
    ("Monday", r"[A-Za-z]+"),
    ("Mon", r"[A-Za-z]{3}"),
    ("2006", r"(?P<year>\d{4})"),
    ("Z07:00", r"(?P<tz>Z|[+-]\d{2}:\d{2})"),
    ("Z0700", r"(?P<tz>Z|[+-]\d{4})"),
    ("Z07", r"(?P<tz>Z|[+-]\d{2})"),
    ("-07:00", r"(?P<tz>[+-]\d{2}:\d{2})"),
    ("-0700", r"(?P<tz>[+-]\d{4})"),
    ("-07", r"(?P<tz>[+-]\d{2})"),
    ("MST", r"(?P<tzname>[A-Z]{3,5})"),
    ("PM", r"(?P<ampm>AM|PM)"),
    ("pm", r"(?P<ampm>am|pm)"),
    ("01", r"(?P<month>\d{2})"),
    ("02", r"(?P<day>\d{2})"),
    ("_2", r" ?(?P<day>\d{1,2})"),
    ("03", r"(?P<hour12>\d{2})"),
    ("04", r"(?P<minute>\d{2})"),
    ("05", r"(?P<second>\d{2})"),
    ("06", r"(?P<year2>\d{2})"),
    ("15", r"(?P<hour>\d{1,2})"),
    ("1", r"(?P<month>\d{1,2})"),
    ("2", r"(?P<day>\d{1,2})"),
    ("3", r"(?P<hour12>\d{1,2})"),
    ("4", r"(?P<minute>\d{1,2})"),
    ("5", r"(?P<second>\d{1,2})"),
]
_FRACTION = re.compile(r"[.,](0+|9+)(?![0-9])")


def _layout_pattern(layout: str) -> re.Pattern[str]:
    parts: list[str] = []
    position = 0
    while position < len(layout):
        fraction = _FRACTION.match(layout, position)
        if fraction:
            parts.append(r"[.,](?P<frac>\d+)")
            position = fraction.end()
            continue
        for token, pattern in _LAYOUT_TOKENS:
            if layout.startswith(token, position):
                parts.append(pattern)
                position += len(token)
                if token in ("05", "5") and not _FRACTION.match(layout, position):
                    parts.append(r"(?:[.,](?P<frac>\d+))?")
                break
        else:
            parts.append(re.escape(layout[position]))
            position += 1
    try:
        return re.compile("".join(parts))
    except re.error as err:
        raise ValueError(f"unsupported layout {layout!r}: {err}") from err


def _zone(text: str) -> timezone:
    if text == "Z":
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    hours = int(digits[:2])
    minutes = int(digits[2:4] or 0)
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_go_time(layout: str, value: str) -> datetime:
    """Parse ``value`` with a layout written as the reference time 2006-01-02 15:04:05.

    Values without a zone are taken as UTC. Raises ValueError when the value
    does not fit the layout.
    """
    match = _layout_pattern(layout).fullmatch(value)
    if match is None:
        raise ValueError(f"cannot parse {value!r} as {layout!r}")
    fields = match.groupdict()

    if fields.get("year"):
        year = int(fields["year"])
    elif fields.get("year2"):
        short = int(fields["year2"])
        year = 1900 + short if short >= 69 else 2000 + short
    else:
        year = 0 if False else 1

    if fields.get("monthname"):
        name = fields["monthname"].lower()
        candidates = [i for i, full in enumerate(_MONTH_NAMES, 1) if full == name or full[:3] == name]
        if not candidates:
            raise ValueError(f"bad month name {fields['monthname']!r}")
        month = candidates[0]
    else:
        month = int(fields.get("month") or 1)

    day = int(fields.get("day") or 1)
    if fields.get("hour12"):
        hour = int(fields["hour12"])
        if not 1 <= hour <= 12:
            raise ValueError(f"hour out of range in {value!r}")
        ampm = (fields.get("ampm") or "AM").upper()
        hour = hour % 12 + (12 if ampm == "PM" else 0)
    else:
        hour = int(fields.get("hour") or 0)
    minute = int(fields.get("minute") or 0)
    second = int(fields.get("second") or 0)
    microsecond = int((fields.get("frac") or "0")[:6].ljust(6, "0"))
    zone = _zone(fields["tz"]) if fields.get("tz") else timezone.utc

    return datetime(year, month, day, hour, minute, second, microsecond, tzinfo=zone)


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def format_time_diff(then: datetime, now: datetime | None = None) -> str:
    """Describe ``then`` relative to ``now`` (default: the current time), e.g. "5 days ago"."""
    then = _aware(then)
    now = _aware(now) if now is not None else datetime.now(timezone.utc)
    seconds = (now - then).total_seconds()
    if seconds < 0:
        return "in " + _apply(_DEFAULT_FORMATTERS, -seconds)
    return _apply(_DEFAULT_FORMATTERS, seconds) + " ago"


def time_diff(*args: str) -> str:
    """Describe a time difference from text arguments.

    One argument: an RFC 3339 time compared with now. Two: two RFC 3339
    times, the second being the start. Three: the two times and a layout.
    """
    match args:
        case ():
            raise ValueError("must supply a time value")
        case (then,):
            return format_time_diff(parse_go_time(RFC3339, then))
        case (then, start):
            return format_time_diff(parse_go_time(RFC3339, then), parse_go_time(RFC3339, start))
        case (then, start, layout, *_):
            return format_time_diff(parse_go_time(layout, then), parse_go_time(layout, start))
    raise ValueError("must supply a time value")


def approx_duration(days: float) -> str:
    """Describe a duration given in days, e.g. "7 months" or "3 years (33 months)"."""
    seconds = abs(float(days)) * _DAY
    return _apply(_APPROX_FORMATTERS, seconds)