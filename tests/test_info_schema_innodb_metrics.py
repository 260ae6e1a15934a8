import pytest

from mysqlexporter.info_schema_innodb_metrics import (
    INFO_SCHEMA_INNODB_METRICS_ENABLED_COLUMN_QUERY,
    INFO_SCHEMA_INNODB_METRICS_QUERY,
    ScrapeInnodbMetrics,
)
from mysqlexporter.metrics import ValueType


def _key(query):
    return " ".join(query.split())


class FakeCursor:
    def __init__(self, results, executed):
        self._results = results
        self._executed = executed
        self.description = None
        self._rows = []

    def execute(self, query):
        key = _key(query)
        self._executed.append(key)
        if key not in self._results:
            raise RuntimeError(f"unexpected query: {key}")
        columns, rows = self._results[key]
        self.description = [(column,) for column in columns]
        self._rows = list(rows)

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class FakeDB:
    def __init__(self, results):
        self.results = {_key(q): value for q, value in results.items()}
        self.executed = []

    def cursor(self):
        return FakeCursor(self.results, self.executed)


COLUMNS = ["name", "subsystem", "type", "comment", "count"]
ROWS = [
    ("lock_timeouts", "lock", "counter", "Number of lock timeouts", 0),
    ("buffer_pool_reads", "buffer", "status_counter", "Number of reads directly from disk (innodb_buffer_pool_reads)", 1),
    ("buffer_pool_size", "server", "value", "Server buffer pool size (all buffer pools) in bytes", 2),
    ("buffer_page_read_system_page", "buffer_page_io", "counter", "Number of System Pages read", 3),
    ("buffer_page_written_undo_log", "buffer_page_io", "counter", "Number of Undo Log Pages written", 4),
    ("buffer_pool_pages_dirty", "buffer", "gauge", "Number of dirt buffer pool pages", 5),
    ("buffer_pool_pages_data", "buffer", "gauge", "Number of data buffer pool pages", 6),
    ("buffer_pool_pages_total", "buffer", "gauge", "Number of total buffer pool pages", 7),
    ("NOPE", "buffer_page_io", "counter", "An invalid buffer_page_io metric", 999),
]

STATUS_QUERY = INFO_SCHEMA_INNODB_METRICS_QUERY.format(column="status", value="enabled")


def _db(enabled_column, rows, query=STATUS_QUERY):
    return FakeDB(
        {
            INFO_SCHEMA_INNODB_METRICS_ENABLED_COLUMN_QUERY: (["COLUMN_NAME"], [(enabled_column,)]),
            query: (COLUMNS, rows),
        }
    )


def test_scrape_innodb_metrics():
    db = _db("STATUS", ROWS)
    got = [(dict(m.labels), m.value, m.value_type) for m in ScrapeInnodbMetrics().scrape(db)]
    assert got == [
        ({}, 0.0, ValueType.COUNTER),
        ({}, 1.0, ValueType.COUNTER),
        ({}, 2.0, ValueType.GAUGE),
        ({"type": "system_page"}, 3.0, ValueType.COUNTER),
        ({"type": "undo_log"}, 4.0, ValueType.COUNTER),
        ({}, 5.0, ValueType.GAUGE),
        ({"state": "data"}, 6.0, ValueType.GAUGE),
    ]
    assert db.executed == [_key(INFO_SCHEMA_INNODB_METRICS_ENABLED_COLUMN_QUERY), _key(STATUS_QUERY)]


def test_metric_names():
    db = _db("STATUS", ROWS)
    names = [m.name for m in ScrapeInnodbMetrics().scrape(db)]
    assert names == [
        "mysql_info_schema_innodb_metrics_lock_lock_timeouts_total",
        "mysql_info_schema_innodb_metrics_buffer_buffer_pool_reads_total",
        "mysql_info_schema_innodb_metrics_server_buffer_pool_size",
        "mysql_info_schema_innodb_metrics_buffer_page_read_total",
        "mysql_info_schema_innodb_metrics_buffer_page_written_total",
        "mysql_info_schema_innodb_metrics_buffer_pool_dirty_pages",
        "mysql_info_schema_innodb_metrics_buffer_pool_pages",
    ]


def test_enabled_column_uses_enabled_filter():
    query = INFO_SCHEMA_INNODB_METRICS_QUERY.format(column="enabled", value="1")
    db = _db("ENABLED", [("lock_timeouts", "lock", "counter", "Number of lock timeouts", 7)], query)
    metrics = list(ScrapeInnodbMetrics().scrape(db))
    assert [(m.value, m.value_type) for m in metrics] == [(7.0, ValueType.COUNTER)]
    assert "`enabled` = '1'" in db.executed[1]


def test_negative_counter_is_gauge():
    db = _db("STATUS", [("lock_timeouts", "lock", "counter", "Number of lock timeouts", -3)])
    metrics = list(ScrapeInnodbMetrics().scrape(db))
    assert [(m.name, m.value, m.value_type) for m in metrics] == [
        ("mysql_info_schema_innodb_metrics_lock_lock_timeouts", -3.0, ValueType.GAUGE)
    ]


def test_unknown_enabled_column_raises():
    db = _db("OTHER", ROWS)
    with pytest.raises(ValueError, match="STATUS or ENABLED"):
        list(ScrapeInnodbMetrics().scrape(db))


def test_missing_enabled_column_raises():
    db = FakeDB({INFO_SCHEMA_INNODB_METRICS_ENABLED_COLUMN_QUERY: (["COLUMN_NAME"], [])})
    with pytest.raises(LookupError):
        list(ScrapeInnodbMetrics().scrape(db))