"""Settings and small helpers shared by the GitHub tables."""

from __future__ import annotations

import logging
import re
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from mergelite.context import Context
from mergelite.options import GitHubRateLimitResponse

DEFAULT_PER_PAGE = 50

_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _noop() -> None:
    return None


class RateLimiter:
    """Token bucket allowing ``burst`` events at once and one more every ``interval`` seconds.

    An interval of zero or less means no limit at all.
    """

    def __init__(
        self,
        interval: float,
        burst: int,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.interval = float(interval)
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burst)
        self._last: float | None = None
        self._lock = threading.Lock()

    def wait(self) -> float:
        """Block until one event is allowed and return the seconds spent waiting."""
        if self.interval <= 0:
            return 0.0
        if self.burst < 1:
            raise ValueError(f"wait(n=1) exceeds limiter's burst {self.burst}")
        with self._lock:
            now = self._clock()
            if self._last is not None:
                elapsed = max(0.0, now - self._last)
                self._tokens = min(float(self.burst), self._tokens + elapsed / self.interval)
            self._last = now
            self._tokens -= 1
            delay = -self._tokens * self.interval if self._tokens < 0 else 0.0
        if delay > 0:
            self._sleep(delay)
        return delay


@dataclass
class GitHubOptions:
    """Settings used by the GitHub tables."""

    client: Callable[[], Any]
    rate_limiter: RateLimiter | None = None
    rate_limit_handler: Callable[[GitHubRateLimitResponse], None] | None = None
    pre_request_hook: Callable[[], None] = _noop
    post_request_hook: Callable[[], None] = _noop
    per_page: int = DEFAULT_PER_PAGE
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))


def _as_context(context: Context | dict[str, str]) -> Context:
    return context if isinstance(context, Context) else Context(context)


def _atoi(text: str) -> int | None:
    if not _INTEGER.fullmatch(text):
        return None
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return None
    return number


def get_github_token(context: Context | dict[str, str]) -> str:
    """Return the githubToken value of ``context``, or an empty string."""
    return context.get("githubToken", "")


def get_github_rate_limit(context: Context | dict[str, str]) -> RateLimiter | None:
    """Build a client-side rate limiter from the githubRateLimit value.

    "2/3" allows 2 requests every 3 seconds; a single integer such as "5"
    allows that many requests per second. None is returned when the key is
    unset or cannot be parsed.
    """
    ctx = _as_context(context)
    if "githubRateLimit" not in ctx:
        return None
    value = ctx["githubRateLimit"]
    if "/" in value:
        first_text, second_text = value.split("/", 1)
        first = _atoi(first_text)
        second = _atoi(second_text)
        if first is None or second is None:
            return None
        return RateLimiter(float(second), first)
    per_second = ctx.get_int("githubRateLimit")
    if per_second is None:
        return None
    return RateLimiter(1.0, per_second)


def get_github_per_page(context: Context | dict[str, str]) -> int:
    """Return the githubPerPage value of ``context``, or 50 when unset, zero or invalid."""
    value = _as_context(context).get_int("githubPerPage")
    return value if value else DEFAULT_PER_PAGE


def order_direction(desc: bool) -> str:
    """Return the GitHub order direction, "DESC" or "ASC"."""
    return "DESC" if desc else "ASC"


def repo_owner_and_name(name: str, full_name_or_owner: str) -> tuple[str, str]:
    """Return ``(owner, name)`` from either "owner/name" alone or an owner and a name."""
    if name:
        return full_name_or_owner, name
    parts = full_name_or_owner.split("/")
    if len(parts) != 2:
        raise ValueError("invalid repo name, must be of format owner/name")
    return parts[0], parts[1]


def affiliations_from_string(affiliations: str) -> list[str]:
    """Split a comma-separated list of repository affiliations."""
    if not affiliations:
        return []
    return affiliations.split(",")