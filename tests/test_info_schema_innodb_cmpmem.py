import pytest

from mysqlexporter.info_schema_innodb_cmpmem import INNODB_CMPMEM_QUERY, ScrapeInnodbCmpMem
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


COLUMNS = ["page_size", "buffer_pool", "pages_used", "pages_free", "relocation_ops", "relocation_time"]


def test_scrape_innodb_cmpmem():
    db = FakeDB({INNODB_CMPMEM_QUERY: (COLUMNS, [("1024", "0", 30, 40, 50, 6000)])})
    got = [(dict(m.labels), m.value, m.value_type) for m in ScrapeInnodbCmpMem().scrape(db)]
    labels = {"page_size": "1024", "buffer_pool": "0"}
    assert got == [
        (labels, 30.0, ValueType.COUNTER),
        (labels, 40.0, ValueType.COUNTER),
        (labels, 50.0, ValueType.COUNTER),
        (labels, 6.0, ValueType.COUNTER),
    ]
    assert db.executed == [_key(INNODB_CMPMEM_QUERY)]


def test_metric_names():
    db = FakeDB({INNODB_CMPMEM_QUERY: (COLUMNS, [("1024", "0", 1, 2, 3, 4)])})
    names = [m.name for m in ScrapeInnodbCmpMem().scrape(db)]
    assert names == [
        "mysql_info_schema_innodb_cmpmem_pages_used_total",
        "mysql_info_schema_innodb_cmpmem_pages_free_total",
        "mysql_info_schema_innodb_cmpmem_relocation_ops_total",
        "mysql_info_schema_innodb_cmpmem_relocation_time_seconds_total",
    ]


def test_no_rows_gives_no_metrics():
    db = FakeDB({INNODB_CMPMEM_QUERY: (COLUMNS, [])})
    assert list(ScrapeInnodbCmpMem().scrape(db)) == []


def test_non_numeric_value_raises():
    db = FakeDB({INNODB_CMPMEM_QUERY: (COLUMNS, [("1024", "0", "abc", 40, 50, 6000)])})
    with pytest.raises(ValueError):
        list(ScrapeInnodbCmpMem().scrape(db))