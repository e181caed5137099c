"""Copying the results of a query into a Postgres table.

The target table is replaced as a whole: rows go into a fresh table first,
which is then swapped in for the old one inside the same transaction.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import uuid
from concurrent.futures import CancelledError
from dataclasses import dataclass, field
from typing import Any, Sequence

_POSTGRES_TYPES = {
    "TEXT": "text",
    "INT": "integer",
    "INTEGER": "integer",
    "DATETIME": "timestamp with time zone",
    "BOOLEAN": "boolean",
}


@dataclass
class SyncOptions:
    """What to copy and where.

    ``postgres`` is a DB-API connection to Postgres whose parameter marker is
    ``placeholder``; ``mergestat`` is the SQLite connection ``query`` runs on.
    Setting ``cancel`` stops the copy and rolls the transaction back.
    """

    postgres: Any
    mergestat: sqlite3.Connection
    table_name: str
    query: str
    schema_name: str = ""
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))
    cancel: threading.Event | None = None
    placeholder: str = "%s"


def quote_identifier(name: str) -> str:
    """Quote ``name`` as a Postgres identifier; anything from a NUL on is dropped."""
    end = name.find("\x00")
    if end >= 0:
        name = name[:end]
    return '"' + name.replace('"', '""') + '"'


def postgres_type(declared_type: str | None) -> str:
    """Map a declared SQLite column type to a Postgres column type (text by default)."""
    return _POSTGRES_TYPES.get((declared_type or "").upper(), "text")


def create_table_sql(
    schema_name: str, table_name: str, columns: Sequence[tuple[str, str | None]]
) -> str:
    """Return a CREATE TABLE statement for ``(name, declared SQLite type)`` columns."""
    body = ",".join(
        f"\n\t\t\t{quote_identifier(name)} {postgres_type(declared)}" for name, declared in columns
    )
    return (
        f"CREATE TABLE {quote_identifier(schema_name)}.{quote_identifier(table_name)} ("
        f"{body}\n\t  )"
    )


def swap_tables_sql(schema_name: str, table_name: str) -> str:
    """Return the statements that replace ``table_name`` with its freshly filled copy."""
    schema = quote_identifier(schema_name)
    temp_new = f"{table_name}_temp"
    temp_drop = f"{table_name}_drop"
    return (
        "\n"
        f"\tALTER TABLE IF EXISTS {schema}.{quote_identifier(table_name)} "
        f"RENAME TO {quote_identifier(temp_drop)};\n"
        f"\tALTER TABLE IF EXISTS {schema}.{quote_identifier(temp_new)} "
        f"RENAME TO {quote_identifier(table_name)};\n"
        f"\tDROP TABLE IF EXISTS {schema}.{quote_identifier(temp_drop)};\n"
    )


def _check(options: SyncOptions) -> None:
    if options.cancel is not None and options.cancel.is_set():
        raise CancelledError("sync cancelled")


def _declared_types(connection: sqlite3.Connection, query: str) -> list[str]:
    view = f"mergelite_sync_{uuid.uuid4().hex}"
    try:
        connection.execute(f'CREATE TEMP VIEW "{view}" AS {query.strip().rstrip(";")}')
    except sqlite3.Error:
        return []
    try:
        return [row[2] or "" for row in connection.execute(f'PRAGMA temp.table_info("{view}")')]
    finally:
        connection.execute(f'DROP VIEW IF EXISTS temp."{view}"')


def _copy(
    options: SyncOptions,
    cursor: Any,
    source: sqlite3.Cursor,
    columns: list[tuple[str, str]],
    schema_name: str,
) -> int:
    log = options.logger
    temp_new = f"{options.table_name}_temp"

    cursor.execute("SET TRANSACTION ISOLATION LEVEL REPEATABLE READ")

    create = create_table_sql(schema_name, temp_new, columns)
    _check(options)
    log.info("%s", create)
    cursor.execute(create)
    _check(options)

    names = ", ".join(quote_identifier(name) for name, _ in columns)
    markers = ", ".join(options.placeholder for _ in columns)
    insert = (
        f"INSERT INTO {quote_identifier(schema_name)}.{quote_identifier(temp_new)} "
        f"({names}) VALUES ({markers})"
    )
    copied = 0
    for row in source:
        _check(options)
        cursor.execute(insert, tuple(row))
        copied += 1

    _check(options)
    swap = swap_tables_sql(schema_name, options.table_name)
    log.info("%s", swap)
    cursor.execute(swap)
    _check(options)
    return copied


def sync(options: SyncOptions) -> int:
    """Replace the target Postgres table with the results of the query.

    CAUTION: the existing table is dropped. Returns the number of rows
    copied. On any error, or on cancellation, the Postgres transaction is
    rolled back and the error is raised.
    """
    log = options.logger
    _check(options)

    types = _declared_types(options.mergestat, options.query)
    source = options.mergestat.execute(options.query)
    try:
        names = [description[0] for description in source.description or ()]
        if len(types) != len(names):
            types = [""] * len(names)
        columns = list(zip(names, types))
        _check(options)

        schema_name = options.schema_name or "public"
        connection = options.postgres
        cursor = connection.cursor()
        try:
            copied = _copy(options, cursor, source, columns, schema_name)
        except BaseException as err:
            log.error("sync of %s failed: %s", options.table_name, err)
            try:
                connection.rollback()
            except Exception as rollback_err:  # noqa: BLE001 - keep the original error
                log.error("rollback failed: %s", rollback_err)
            raise
        finally:
            close = getattr(cursor, "close", None)
            if close is not None:
                close()
        connection.commit()
        return copied
    finally:
        source.close()