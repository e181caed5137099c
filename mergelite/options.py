"""Options that select and tune the extension's tables and functions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Protocol, runtime_checkable

from mergelite.context import Context


@dataclass
class GitHubRateLimitResponse:
    """The caller's rate limit as reported by the GitHub GraphQL API."""

    cost: int = 0
    limit: int = 0
    node_count: int = 0
    remaining: int = 0
    reset_at: datetime | None = None
    used: int = 0


@runtime_checkable
class RepoLocator(Protocol):
    """Service that creates or opens an existing git repository."""

    def open(self, path: str) -> Any:
        """Open the repository at ``path``, which may also name a remote resource."""
        ...


@dataclass
class Options:
    """Switches and settings passed when registering the extension."""

    exclude_git: bool = False
    locator: RepoLocator | None = None
    extra_functions: bool = False
    github: bool = False
    github_client_getter: Callable[[], Any] | None = None
    github_rate_limit_handler: Callable[[GitHubRateLimitResponse], None] | None = None
    github_pre_request_hook: Callable[[], None] | None = None
    github_post_request_hook: Callable[[], None] | None = None
    sourcegraph: bool = False
    sourcegraph_client_getter: Callable[[], Any] | None = None
    npm: bool = False
    npm_http_client: Any = None
    context: Context = field(default_factory=Context)
    logger: logging.Logger | None = None


OptionFn = Callable[[Options], None]


def build_options(*args: OptionFn) -> Options:
    """Return a new Options with every option function applied in order."""
    options = Options()
    for option in args:
        option(options)
    return options


def with_exclude_git(exclude: bool) -> OptionFn:
    """Set whether git functionality is left out."""

    def apply(options: Options) -> None:
        options.exclude_git = exclude

    return apply


def with_extra_functions() -> OptionFn:
    """Also register the bundled utility SQL routines."""

    def apply(options: Options) -> None:
        options.extra_functions = True

    return apply


def with_github() -> OptionFn:
    """Also register the GitHub tables and functions."""

    def apply(options: Options) -> None:
        options.github = True

    return apply


def with_github_client_getter(getter: Callable[[], Any]) -> OptionFn:
    """Use a custom GitHub client."""

    def apply(options: Options) -> None:
        options.github_client_getter = getter

    return apply


def with_github_rate_limit_handler(
    handler: Callable[[GitHubRateLimitResponse], None],
) -> OptionFn:
    """Use a custom handler for GitHub API rate limit responses."""

    def apply(options: Options) -> None:
        options.github_rate_limit_handler = handler

    return apply


def with_github_pre_request_hook(hook: Callable[[], None]) -> OptionFn:
    """Run ``hook`` before each GitHub API request."""

    def apply(options: Options) -> None:
        options.github_pre_request_hook = hook

    return apply


def with_github_post_request_hook(hook: Callable[[], None]) -> OptionFn:
    """Run ``hook`` after each GitHub API request."""

    def apply(options: Options) -> None:
        options.github_post_request_hook = hook

    return apply


def with_sourcegraph() -> OptionFn:
    """Also register the Sourcegraph tables and functions."""

    def apply(options: Options) -> None:
        options.sourcegraph = True

    return apply


def with_sourcegraph_client_getter(getter: Callable[[], Any]) -> OptionFn:
    """Use a custom GraphQL client for Sourcegraph."""

    def apply(options: Options) -> None:
        options.sourcegraph_client_getter = getter

    return apply


def with_npm() -> OptionFn:
    """Also register the NPM tables and functions."""

    def apply(options: Options) -> None:
        options.npm = True

    return apply


def with_npm_http_client(client: Any) -> OptionFn:
    """Use ``client`` for the NPM registry requests."""

    def apply(options: Options) -> None:
        options.npm_http_client = client

    return apply


def with_repo_locator(locator: RepoLocator) -> OptionFn:
    """Use ``locator`` to locate and open git repositories."""

    def apply(options: Options) -> None:
        options.locator = locator

    return apply


def with_context_value(key: str, value: str) -> OptionFn:
    """Set ``key`` in the options context, replacing any earlier value."""

    def apply(options: Options) -> None:
        options.context[key] = value

    return apply


def with_logger(logger: logging.Logger) -> OptionFn:
    """Set the logger the extensions use."""

    def apply(options: Options) -> None:
        options.logger = logger

    return apply