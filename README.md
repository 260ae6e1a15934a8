# mysqlexporter

`mysqlexporter` reads the state of a MySQL, Percona Server or MariaDB
instance and turns it into Prometheus-style metric samples. Each group of
statistics is gathered by its own scraper. A scraper takes an open DB-API
connection and yields `Metric` objects.

The package has no dependencies of its own. Bring any DB-API 2 driver for
MySQL (for example PyMySQL or mysqlclient); the scrapers only need the
connection's `cursor()` with `execute`, `description` and `fetchall`.

## Scrapers

| Module | Scraper | Source on the server | `version` |
| --- | --- | --- | --- |
| `global_status` | `ScrapeGlobalStatus` | `SHOW GLOBAL STATUS` | 5.1 |
| `global_variables` | `ScrapeGlobalVariables` | `SHOW GLOBAL VARIABLES` | 5.1 |
| `binlog` | `ScrapeBinlogSize` | `SELECT @@log_bin`, `SHOW BINARY LOGS` | 5.1 |
| `engine_innodb` | `ScrapeEngineInnodbStatus` | `SHOW ENGINE INNODB STATUS` | 5.1 |
| `engine_tokudb` | `ScrapeEngineTokudbStatus` | `SHOW ENGINE TOKUDB STATUS` | 5.6 |
| `heartbeat` | `ScrapeHeartbeat` | a `pt-heartbeat` style table | 5.1 |
| `info_schema_auto_increment` | `ScrapeAutoIncrementColumns` | `information_schema` auto_increment columns | 5.1 |
| `info_schema_clientstats` | `ScrapeClientStat` | `information_schema.client_statistics` | 5.5 |
| `info_schema_innodb_cmp` | `ScrapeInnodbCmp` | `information_schema.innodb_cmp` | 5.5 |
| `info_schema_innodb_cmpmem` | `ScrapeInnodbCmpMem` | `information_schema.innodb_cmpmem` | 5.5 |
| `info_schema_innodb_metrics` | `ScrapeInnodbMetrics` | `information_schema.innodb_metrics` | 5.6 |
| `info_schema_innodb_sys_tablespaces` | `ScrapeInfoSchemaInnodbTablespaces` | `information_schema.innodb_(sys_)tablespaces` | 5.7 |

Every scraper subclasses `mysqlexporter.collector.Scraper` and has the class
attributes `name`, `help` and `version`. `version` is the oldest server
version the scraper is meant for; the scrapers do not check it themselves.

A few details:

- `ScrapeBinlogSize` yields nothing when `@@log_bin` is 0.
- `ScrapeClientStat` yields nothing when the `userstat` variable cannot be
  read or is `OFF`.
- `ScrapeHeartbeat` is a dataclass with the fields `database`, `table`
  (both `"heartbeat"` by default) and `utc` (`False`). With `utc=True` the
  current time is read with `UTC_TIMESTAMP(6)` instead of `NOW(6)`.
  `query()` returns the SQL it runs.
- A scraper raises an exception (`ValueError`, `LookupError` or the
  driver's own error) when a query fails or returns rows it cannot read.

## Example

```python
import pymysql

from mysqlexporter.engine_innodb import ScrapeEngineInnodbStatus
from mysqlexporter.heartbeat import ScrapeHeartbeat

db = pymysql.connect(host="localhost", user="user")
try:
    for scraper in (ScrapeEngineInnodbStatus(), ScrapeHeartbeat(utc=True)):
        for metric in scraper.scrape(db):
            print(metric.name, dict(metric.labels), metric.value_type.value, metric.value)
finally:
    db.close()
```

## Metric objects

`mysqlexporter.metrics` holds the small data model the scrapers produce:

- `ValueType`: `COUNTER`, `GAUGE` or `UNTYPED`.
- `Desc(fq_name, help, variable_labels)`: a validated metric descriptor.
  `Desc.metric(value_type, value, *label_values)` creates a sample and
  raises `ValueError` when the number of label values does not match.
- `Metric`: a frozen sample with `desc`, `value_type`, `value`, `labels`
  and the `name` property.
- `build_fq_name(namespace, subsystem, name)` joins the non-empty parts
  with underscores.

## Helpers

`mysqlexporter.collector` holds the helpers the scrapers share:

- `fetch_rows(db, query)` returns the column names and all rows of a query.
- `new_desc(subsystem, name, help)` makes a label-less descriptor in the
  `mysql` namespace.
- `parse_status(data)` turns values such as `ON`, `OFF`, `Primary`, dates,
  binlog file names and plain numbers into floats, or returns `None`.
- `parse_privilege(data)` maps `Y`/`N` to 1.0/0.0.
- `parse_gtid(s)` parses a GTID set such as
  `3E11FA47-71CA-11E1-9E33-C80AA9429562:1-3:11` into
  `GlobalTransactionIdentifier` and `TransactionDetail` records, and raises
  `ValueError` on a malformed set.
- `valid_prometheus_name(s)` turns a server variable name into a valid,
  lower-case metric name.

Also available: `engine_tokudb.sanitize_tokudb_metric(name)` and
`global_variables.parse_wsrep_provider_options(opts)`, which returns the
Galera `gcache.size` in bytes.

## What the package does not do

It does not open connections, pick scrapers by server version, run
scrapers together, or add `up`, success or duration metrics of its own.
It has no HTTP endpoint, no text exposition format and no command-line
program. Those are left to the code that uses the scrapers.

## Tests

The test suite uses pytest and needs no running server. Install it with
the `test` extra and run `pytest`.