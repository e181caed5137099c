"""Conversion of TOML, YAML and XML documents to compact JSON."""

from __future__ import annotations

import json
import math
import tomllib
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

import xmltodict
import yaml

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _YamlLoader(yaml.SafeLoader):
    """Safe loader that keeps timestamps as plain strings."""


_YamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _encode_string(text: str) -> str:
    encoded = json.dumps(text, ensure_ascii=False)
    for char, escaped in _HTML_ESCAPES.items():
        encoded = encoded.replace(char, escaped)
    return encoded


def _format_float(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"unsupported value: {value!r}")
    magnitude = abs(value)
    if magnitude != 0 and (magnitude < 1e-6 or magnitude >= 1e21):
        return repr(value).replace("e-0", "e-")
    return format(Decimal(repr(value)).normalize(), "f")


def _format_datetime(value: datetime) -> str:
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if offset is None:
        return text
    if offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = int(abs(offset).total_seconds()) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _marshal(value: Any) -> str:
    match value:
        case None:
            return "null"
        case bool():
            return "true" if value else "false"
        case int():
            return str(value)
        case float():
            return _format_float(value)
        case str():
            return _encode_string(value)
        case datetime():
            return _encode_string(_format_datetime(value))
        case date() | time():
            return _encode_string(value.isoformat())
        case dict():
            items = sorted((str(key), item) for key, item in value.items())
            return "{" + ",".join(f"{_encode_string(key)}:{_marshal(item)}" for key, item in items) + "}"
        case list() | tuple():
            return "[" + ",".join(_marshal(item) for item in value) + "]"
    raise ValueError(f"unsupported value of type {type(value).__name__}")


def _yaml_key(key: Any) -> str:
    match key:
        case None:
            return "null"
        case bool():
            return "true" if key else "false"
        case float():
            return _format_float(key)
    return str(key)


def _yaml_normalize(value: Any) -> Any:
    if isinstance(value, dict):
        return {_yaml_key(key): _yaml_normalize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_yaml_normalize(item) for item in value]
    return value


def _xml_normalize(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, dict):
        return {key: _xml_normalize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_xml_normalize(item) for item in value]
    return value


def _as_text(text: str | bytes) -> str:
    return text.decode("utf-8") if isinstance(text, (bytes, bytearray)) else text


def toml_to_json(text: str | bytes) -> str:
    """Convert a TOML document to compact JSON with sorted keys."""
    try:
        document = tomllib.loads(_as_text(text))
    except tomllib.TOMLDecodeError as err:
        raise ValueError(str(err)) from err
    return _marshal(document)


def yaml_to_json(text: str | bytes) -> str:
    """Convert a YAML document to compact JSON with sorted keys.

    Timestamps stay strings and non-string mapping keys become strings.
    """
    try:
        document = yaml.load(text, Loader=_YamlLoader)
    except yaml.YAMLError as err:
        raise ValueError(str(err)) from err
    return _marshal(_yaml_normalize(document))


def xml_to_json(text: str | bytes) -> str:
    """Convert an XML document to compact JSON with sorted keys.

    Attributes are keyed with a "-" prefix, element text under "#text",
    and every value is a string.
    """
    try:
        document = xmltodict.parse(text.lstrip(), attr_prefix="-", cdata_key="#text")
    except Exception as err:
        raise ValueError(f"invalid xml: {err}") from err
    return _marshal(_xml_normalize(document))