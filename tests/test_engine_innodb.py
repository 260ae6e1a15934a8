import pytest

from mysqlexporter.engine_innodb import ENGINE_INNODB_STATUS_QUERY, ScrapeEngineInnodbStatus
from mysqlexporter.metrics import ValueType


class FakeCursor:
    def __init__(self, db):
        self._db = db
        self.description = None
        self._rows = []

    def execute(self, query):
        expected, columns, rows = self._db.expected.pop(0)
        assert " ".join(query.split()) == " ".join(expected.split())
        self.description = [(name, None, None, None, None, None, None) for name in columns]
        self._rows = list(rows)

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class FakeDB:
    def __init__(self, *expected):
        self.expected = list(expected)

    def cursor(self):
        return FakeCursor(self)


SAMPLE = "\n".join(
    [
        "",
        "=== monitor report (test fixture) ===",
        "BACKGROUND",
        "main loop iterations: 7 active, 0 idle",
        "SEMAPHORE SECTION",
        "wait array reservations 3",
        "ROW OPS",
        "661 queries inside InnoDB, 10 queries in queue",
        "15 read views open inside InnoDB",
        "2 RW transactions active inside InnoDB",
        "rows inserted 1, updated 2, deleted 3, read 4",
        "=== end of fixture ===",
        "\t",
    ]
)


def test_scrape_engine_innodb_status():
    db = FakeDB((ENGINE_INNODB_STATUS_QUERY, ["Type", "Name", "Status"], [("InnoDB", "", SAMPLE)]))
    metrics = list(ScrapeEngineInnodbStatus().scrape(db))
    assert [(dict(m.labels), m.value, m.value_type) for m in metrics] == [
        ({}, 661.0, ValueType.GAUGE),
        ({}, 10.0, ValueType.GAUGE),
        ({}, 15.0, ValueType.GAUGE),
    ]
    assert [m.name for m in metrics] == [
        "mysql_engine_innodb_queries_inside_innodb",
        "mysql_engine_innodb_queries_in_queue",
        "mysql_engine_innodb_read_views_open_inside_innodb",
    ]
    assert db.expected == []


def test_scrape_engine_innodb_status_no_rows():
    db = FakeDB((ENGINE_INNODB_STATUS_QUERY, ["Type", "Name", "Status"], []))
    assert list(ScrapeEngineInnodbStatus().scrape(db)) == []


def test_scrape_engine_innodb_status_wrong_columns():
    db = FakeDB((ENGINE_INNODB_STATUS_QUERY, ["Type", "Status"], [("InnoDB", SAMPLE)]))
    with pytest.raises(ValueError):
        list(ScrapeEngineInnodbStatus().scrape(db))