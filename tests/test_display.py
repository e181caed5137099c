import csv
import io
import json
import os
import sqlite3
from unittest import mock

import pytest

from mergelite.display import write_to


@pytest.fixture
def cursor():
    connection = sqlite3.connect(":memory:")
    connection.execute("CREATE TABLE t (id TEXT, name TEXT, value TEXT)")
    connection.executemany(
        "INSERT INTO t VALUES (?, ?, ?)",
        [("1", "name 1", "value 1"), ("2", "name 2", "value 2"), ("3", "name 3", "value 3")],
    )
    yield connection.execute("SELECT id, name, value FROM t ORDER BY id")
    connection.close()


def _query(sql, *params):
    connection = sqlite3.connect(":memory:")
    return connection.execute(sql, params)


def _render(cursor, fmt, interactive=False):
    stream = io.StringIO()
    write_to(cursor, stream, fmt, interactive)
    return stream.getvalue()


def test_table(cursor):
    lines = _render(cursor, "table", True).splitlines()
    assert len(lines) >= 3
    assert lines[:4] == [
        "+----+--------+---------+",
        "| ID | NAME   | VALUE   |",
        "+----+--------+---------+",
        "| 1  | name 1 | value 1 |",
    ]
    assert len(lines) == 9


def test_table_null():
    lines = _render(_query("SELECT NULL AS x"), "table", True).splitlines()
    assert lines[3] == "| NULL |"


def test_table_truncated_to_terminal_width(cursor):
    with mock.patch("os.get_terminal_size", return_value=os.terminal_size((20, 10))):
        lines = _render(cursor, "table").splitlines()
    assert all(len(line) == 20 and line.endswith("~") for line in lines)


def test_table_default_width_without_terminal():
    cur = _query("SELECT ? AS v", "x" * 600)
    with mock.patch("os.get_terminal_size", side_effect=OSError):
        lines = _render(cur, "table").splitlines()
    assert max(len(line) for line in lines) == 500


def test_table_interactive_not_truncated():
    cur = _query("SELECT ? AS v", "x" * 600)
    lines = _render(cur, "table", True).splitlines()
    assert max(len(line) for line in lines) == 604


def test_csv(cursor):
    out = _render(cursor, "csv")
    records = list(csv.reader(io.StringIO(out)))
    assert len(records) == 4
    assert len(records[0]) == 3
    assert out.splitlines()[0] == "id,name,value"


def test_csv_noheader(cursor):
    records = list(csv.reader(io.StringIO(_render(cursor, "csv-noheader"))))
    assert len(records) == 3
    assert len(records[0]) == 3


def test_tsv(cursor):
    records = list(csv.reader(io.StringIO(_render(cursor, "tsv")), delimiter="\t"))
    assert len(records) == 4
    assert len(records[0]) == 3


def test_tsv_noheader(cursor):
    records = list(csv.reader(io.StringIO(_render(cursor, "tsv-noheader")), delimiter="\t"))
    assert len(records) == 3
    assert len(records[0]) == 3


def test_csv_quoting_and_null():
    cur = _query("SELECT ? AS a, NULL AS b, ? AS c, ? AS d", "x,y", ' lead', 'say "hi"')
    assert _render(cur, "csv-noheader") == '"x,y",," lead","say ""hi"""\n'


def test_json(cursor):
    rows = json.loads(_render(cursor, "json"))
    assert len(rows) == 3
    assert rows[0]["name"] == "name 1"


def test_json_escapes_html_and_sorts_keys():
    out = _render(_query("SELECT ? AS z, 1 AS a", "<b>&"), "json")
    assert out == '[{"a":1,"z":"\\u003cb\\u003e\\u0026"}]'


def test_ndjson(cursor):
    out = _render(cursor, "ndjson")
    assert out.count("\n") == 3
    assert json.loads(out.splitlines()[1]) == {"id": "2", "name": "name 2", "value": "value 2"}


def test_single(cursor):
    assert _render(cursor, "single") == "1"


def test_single_without_rows():
    with pytest.raises(ValueError):
        _render(_query("SELECT 1 WHERE 0"), "single")