import sqlite3

import pytest

from mergelite.tools import row_content


@pytest.fixture
def connection():
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


def test_mixed_values(connection):
    cursor = connection.execute("SELECT 1, 'a', NULL")
    assert row_content(cursor) == (3, [["1", "a", "NULL"]])


def test_multiple_rows_keep_order(connection):
    connection.execute("CREATE TABLE t (id INTEGER, name TEXT)")
    connection.executemany(
        "INSERT INTO t VALUES (?, ?)", [(1, "name 1"), (2, "name 2"), (3, None)]
    )
    count, contents = row_content(connection.execute("SELECT id, name FROM t ORDER BY id"))
    assert count == 2
    assert contents == [["1", "name 1"], ["2", "name 2"], ["3", "NULL"]]


def test_empty_result_still_counts_columns(connection):
    count, contents = row_content(connection.execute("SELECT 1 AS a, 2 AS b WHERE 0"))
    assert count == 2
    assert contents == []


def test_blob_is_decoded(connection):
    cursor = connection.execute("SELECT ?", (b"hello",))
    assert row_content(cursor) == (1, [["hello"]])


def test_float_formatting(connection):
    cursor = connection.execute("SELECT 1.5, 2.0, 1e21, 0.00001")
    _, contents = row_content(cursor)
    assert contents[0][0] == "1.5"
    assert contents[0][1] == "2"
    assert contents[0][2] == "1e+21"
    assert contents[0][3] == "1e-05"


def test_negative_numbers(connection):
    cursor = connection.execute("SELECT -42, -0.25")
    assert row_content(cursor) == (2, [["-42", "-0.25"]])


def test_statement_without_result_set(connection):
    cursor = connection.execute("CREATE TABLE empty (x)")
    assert row_content(cursor) == (0, [])