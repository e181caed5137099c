import sqlite3
import threading
from concurrent.futures import CancelledError

import pytest

from mergelite.pgsync import (
    SyncOptions,
    create_table_sql,
    postgres_type,
    quote_identifier,
    swap_tables_sql,
    sync,
)


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection
        self.closed = False

    def execute(self, sql, params=None):
        if self.connection.fail_on and self.connection.fail_on in sql:
            raise RuntimeError("boom")
        self.connection.statements.append((sql, params))

    def close(self):
        self.closed = True


class FakePostgres:
    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.statements = []
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


@pytest.fixture
def mergestat():
    connection = sqlite3.connect(":memory:")
    connection.execute(
        "CREATE TABLE commits (hash TEXT, additions INT, author_when DATETIME, merged BOOLEAN)"
    )
    connection.executemany(
        "INSERT INTO commits VALUES (?, ?, ?, ?)",
        [("aaa", 3, "2022-01-01", 1), ("bbb", 5, "2022-02-01", 0)],
    )
    yield connection
    connection.close()


def test_quote_identifier_plain():
    assert quote_identifier("users") == '"users"'


def test_quote_identifier_doubles_quotes():
    assert quote_identifier('a"b') == '"a""b"'


def test_quote_identifier_stops_at_nul():
    assert quote_identifier("ab\x00cd") == '"ab"'


@pytest.mark.parametrize(
    "declared, expected",
    [
        ("TEXT", "text"),
        ("INT", "integer"),
        ("INTEGER", "integer"),
        ("DATETIME", "timestamp with time zone"),
        ("BOOLEAN", "boolean"),
        ("integer", "integer"),
        ("", "text"),
        (None, "text"),
        ("JSON", "text"),
    ],
)
def test_postgres_type(declared, expected):
    assert postgres_type(declared) == expected


def test_create_table_sql_layout():
    sql = create_table_sql("public", "repos_temp", [("name", "TEXT"), ("stars", "INT")])
    assert sql == (
        'CREATE TABLE "public"."repos_temp" (\n'
        '\t\t\t"name" text,\n'
        '\t\t\t"stars" integer\n'
        "\t  )"
    )


def test_create_table_sql_has_one_comma_less_than_columns():
    columns = [("a", "TEXT"), ("b", "INT"), ("c", "BOOLEAN"), ("d", "")]
    sql = create_table_sql("s", "t", columns)
    assert sql.count(",\n") == len(columns) - 1
    assert not sql.rstrip(")").rstrip().endswith(",")


def test_swap_tables_sql_order():
    sql = swap_tables_sql("public", "repos")
    rename_old = sql.index('ALTER TABLE IF EXISTS "public"."repos" RENAME TO "repos_drop";')
    rename_new = sql.index('ALTER TABLE IF EXISTS "public"."repos_temp" RENAME TO "repos";')
    drop = sql.index('DROP TABLE IF EXISTS "public"."repos_drop";')
    assert rename_old < rename_new < drop


def test_sync_copies_rows(mergestat):
    postgres = FakePostgres()
    options = SyncOptions(
        postgres=postgres,
        mergestat=mergestat,
        table_name="commits",
        query="SELECT hash, additions, author_when, merged FROM commits ORDER BY hash",
    )
    assert sync(options) == 2
    assert postgres.commits == 1
    assert postgres.rollbacks == 0

    statements = [sql for sql, _ in postgres.statements]
    assert statements[0] == "SET TRANSACTION ISOLATION LEVEL REPEATABLE READ"
    assert statements[1] == create_table_sql(
        "public",
        "commits_temp",
        [("hash", "TEXT"), ("additions", "INT"), ("author_when", "DATETIME"), ("merged", "BOOLEAN")],
    )
    assert statements[-1] == swap_tables_sql("public", "commits")

    inserted = [params for sql, params in postgres.statements if sql.startswith("INSERT")]
    assert inserted == [("aaa", 3, "2022-01-01", 1), ("bbb", 5, "2022-02-01", 0)]


def test_sync_expressions_become_text(mergestat):
    postgres = FakePostgres()
    options = SyncOptions(
        postgres=postgres,
        mergestat=mergestat,
        table_name="totals",
        schema_name="stats",
        query="SELECT count(*) AS total FROM commits",
    )
    assert sync(options) == 1
    create = postgres.statements[1][0]
    assert create == create_table_sql("stats", "totals_temp", [("total", "")])
    assert '"total" text' in create


def test_sync_uses_placeholder(mergestat):
    postgres = FakePostgres()
    options = SyncOptions(
        postgres=postgres,
        mergestat=mergestat,
        table_name="t",
        query="SELECT hash, additions FROM commits",
        placeholder="?",
    )
    sync(options)
    insert = next(sql for sql, _ in postgres.statements if sql.startswith("INSERT"))
    assert insert.endswith("VALUES (?, ?)")


def test_sync_rolls_back_on_error(mergestat):
    postgres = FakePostgres(fail_on="INSERT")
    options = SyncOptions(
        postgres=postgres,
        mergestat=mergestat,
        table_name="commits",
        query="SELECT hash FROM commits",
    )
    with pytest.raises(RuntimeError):
        sync(options)
    assert postgres.rollbacks == 1
    assert postgres.commits == 0


def test_sync_cancelled_before_start(mergestat):
    postgres = FakePostgres()
    cancel = threading.Event()
    cancel.set()
    options = SyncOptions(
        postgres=postgres,
        mergestat=mergestat,
        table_name="commits",
        query="SELECT hash FROM commits",
        cancel=cancel,
    )
    with pytest.raises(CancelledError):
        sync(options)
    assert postgres.statements == []
    assert postgres.commits == 0


def test_sync_leaves_no_temp_views(mergestat):
    postgres = FakePostgres()
    options = SyncOptions(
        postgres=postgres,
        mergestat=mergestat,
        table_name="commits",
        query="SELECT hash FROM commits;",
    )
    sync(options)
    views = mergestat.execute("SELECT name FROM temp.sqlite_master WHERE type = 'view'").fetchall()
    assert views == []