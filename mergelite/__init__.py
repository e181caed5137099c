"""SQL helper functions, result formatting and Postgres copying for querying code repositories."""

__version__ = "0.1.0"