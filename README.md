# mergelite

Helpers for asking SQL-shaped questions about source code. The package
provides:

- SQL functions for SQLite connections: `str_split`, `toml_to_json`,
  `yaml_to_json` / `yml_to_json`, `xml_to_json`, `time_diff` and `approx_dur`;
- the same functions as plain Python, plus generators that split text into
  numbered rows and search text line by line with context lines;
- output of query results as a text table, CSV, TSV, JSON, NDJSON or a single
  value;
- copying the result of a SQLite query into a PostgreSQL table;
- option and context objects for configuring the extension, and helpers for
  GitHub settings such as page size and a client-side rate limiter.

## Installation

```
pip install mergelite
```

Python 3.11 or later is required. To run the test suite, install the `test`
extra:

```
pip install "mergelite[test]"
pytest
```

## SQL functions on a SQLite connection

```python
import sqlite3

from mergelite.functions import register_helpers

conn = sqlite3.connect(":memory:")
register_helpers(conn)

conn.execute("SELECT str_split('hello world', ' ', 0)").fetchone()
# ('hello',)
conn.execute("SELECT str_split('hello world', ' ', 10)").fetchone()
# (None,)
conn.execute("SELECT yml_to_json('doe: \"a deer, a female deer\"')").fetchone()
# ('{"doe":"a deer, a female deer"}',)
conn.execute("SELECT approx_dur(31)").fetchone()
# ('1 month',)
```

`time_diff` takes one RFC 3339 time (compared with now), two RFC 3339 times
(the second is the start), or two times and a layout written as the reference
time `2006-01-02 15:04:05`, and returns text such as `5 days ago`.

## The same functions from Python

```python
from mergelite.converters import toml_to_json, xml_to_json, yaml_to_json
from mergelite.strings import grep, str_split, str_split_rows
from mergelite.timediff import approx_duration, parse_go_time, time_diff

toml_to_json('[package]\nname = "hog"')
# '{"package":{"name":"hog"}}'

xml_to_json("<employee><fname>john</fname><lname>doe</lname></employee>")
# '{"employee":{"fname":"john","lname":"doe"}}'

approx_duration(365)
# '1 year (12 months)'

list(str_split_rows("a,b,c", ","))
# [(1, 'a'), (2, 'b'), (3, 'c')]

for match in grep("line1\nline2\nabc\nline3", "abc", 2, 0):
    print(match.line_no, match.line)
# 3 line1
# line2
# abc
```

The converters emit compact JSON with sorted keys and raise `ValueError` on
malformed input. `grep` raises at once when the search pattern is empty or
not a valid regular expression.

## Writing query results

```python
import sys

from mergelite.display import write_to

cursor = conn.execute("SELECT 1 AS id, 'name 1' AS name")
write_to(cursor, sys.stdout, "csv", False)
```

Formats: `single`, `csv`, `csv-noheader`, `tsv`, `tsv-noheader`, `json`,
`ndjson`; any other value draws a table. A table is cut to the terminal width
(500 columns when there is no terminal) unless `interactive` is true.

`mergelite.tools.row_content(cursor)` reads all rows of a cursor as text,
with `NULL` for SQL NULL, and returns the column count with the rows.

## Options and context

```python
from mergelite.options import build_options, with_context_value, with_github
from mergelite.github_utils import get_github_per_page, get_github_rate_limit

options = build_options(
    with_github(),
    with_context_value("githubToken", "token"),
    with_context_value("githubPerPage", "50"),
    with_context_value("githubRateLimit", "2/3"),
)

get_github_per_page(options.context)      # 50
limiter = get_github_rate_limit(options.context)
limiter.wait()                             # blocks once the burst is used up
```

`githubRateLimit` takes either `requests/seconds` (here 2 requests every 3
seconds) or a plain number of requests per second; `githubPerPage` defaults
to 50. `Context.get_int` and `Context.get_bool` read typed values and return
`None` when a key is unset or empty.

## Copying into PostgreSQL

`mergelite.pgsync.sync(SyncOptions(...))` runs a query on a SQLite
connection, loads its rows into a new Postgres table through any DB-API
connection you pass in, then swaps it in place of the named table and returns
the number of rows copied. The previous table is dropped, so point it only at
tables that may be replaced. On error or cancellation (set the `cancel`
event) the transaction is rolled back and the error raised. No Postgres
driver is installed with the package.

## What the package does not do

There is no command-line program. The package opens no git repositories and
offers no tables over commits, files or blame. It holds settings for GitHub
access but makes no GitHub requests itself, and it has no mailmap parser,
`go.mod` reader, npm registry client or Sourcegraph search.