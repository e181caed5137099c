"""Key-value environment shared by the query extensions.

A context holds general configuration such as API tokens, page sizes or
rate limits, so that one extension does not depend on another to get it.
"""

from __future__ import annotations

import re

_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class Context(dict[str, str]):
    """Configuration values, such as API tokens, keyed by name."""

    def get_int(self, key: str) -> int | None:
        """Return the value of ``key`` as an int.

        None is returned when the key is unset, empty, or not a plain
        64-bit decimal integer.
        """
        value = self.get(key, "")
        if not value or not _INTEGER.fullmatch(value):
            return None
        number = int(value)
        if not _INT64_MIN <= number <= _INT64_MAX:
            return None
        return number

    def get_bool(self, key: str) -> bool | None:
        """Return whether ``key`` holds "true", ignoring case.

        None is returned when the key is unset or empty.
        """
        value = self.get(key, "")
        if not value:
            return None
        return value.casefold() == "true"