import pytest

from mysqlexporter.collector import USERSTAT_CHECK_QUERY
from mysqlexporter.info_schema_clientstats import CLIENT_STAT_QUERY, ScrapeClientStat
from mysqlexporter.metrics import ValueType


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.description = None
        self._rows = []

    def execute(self, query):
        self.conn.executed.append(query)
        if query not in self.conn.results:
            raise LookupError(f"unexpected query {query!r}")
        columns, rows = self.conn.results[query]
        self.description = [(name,) for name in columns]
        self._rows = list(rows)

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class FakeConnection:
    def __init__(self, results):
        self.results = results
        self.executed = []

    def cursor(self):
        return FakeCursor(self)


COLUMNS = [
    "CLIENT", "TOTAL_CONNECTIONS", "CONCURRENT_CONNECTIONS", "CONNECTED_TIME", "BUSY_TIME",
    "CPU_TIME", "BYTES_RECEIVED", "BYTES_SENT", "BINLOG_BYTES_WRITTEN", "ROWS_READ", "ROWS_SENT",
    "ROWS_DELETED", "ROWS_INSERTED", "ROWS_UPDATED", "SELECT_COMMANDS", "UPDATE_COMMANDS",
    "OTHER_COMMANDS", "COMMIT_TRANSACTIONS", "ROLLBACK_TRANSACTIONS", "DENIED_CONNECTIONS",
    "LOST_CONNECTIONS", "ACCESS_DENIED", "EMPTY_QUERIES",
]
ROW = (
    "localhost", 1002, 0, 127027, 286, 245, 2565104853.0, 21090856, 2380108042.0, 767691, 1764,
    8778, 1210741, 0, 1764, 1214416, 293, 2430888, 0, 0, 0, 0, 0,
)


def _userstat(value):
    return (["Variable_name", "Value"], [("userstat", value)])


def _summary(metrics):
    return [(m.labels, m.value, m.value_type) for m in metrics]


def test_scrape_client_stat():
    db = FakeConnection(
        {USERSTAT_CHECK_QUERY: _userstat("ON"), CLIENT_STAT_QUERY: (COLUMNS, [ROW])}
    )
    got = _summary(ScrapeClientStat().scrape(db))
    label = {"client": "localhost"}
    counter, gauge = ValueType.COUNTER, ValueType.GAUGE
    expected = [
        (label, 1002, counter),
        (label, 0, gauge),
        (label, 127027, counter),
        (label, 286, counter),
        (label, 245, counter),
        (label, 2565104853.0, counter),
        (label, 21090856, counter),
        (label, 2380108042.0, counter),
        (label, 767691, counter),
        (label, 1764, counter),
        (label, 8778, counter),
        (label, 1210741, counter),
        (label, 0, counter),
        (label, 1764, counter),
        (label, 1214416, counter),
        (label, 293, counter),
        (label, 2430888, counter),
        (label, 0, counter),
        (label, 0, counter),
        (label, 0, counter),
        (label, 0, counter),
        (label, 0, counter),
    ]
    assert got == expected
    assert db.executed == [USERSTAT_CHECK_QUERY, CLIENT_STAT_QUERY]


def test_metric_names_follow_columns():
    db = FakeConnection(
        {USERSTAT_CHECK_QUERY: _userstat("ON"), CLIENT_STAT_QUERY: (COLUMNS, [ROW])}
    )
    names = [m.name for m in ScrapeClientStat().scrape(db)]
    assert names[0] == "mysql_info_schema_client_statistics_total_connections"
    assert names[1] == "mysql_info_schema_client_statistics_concurrent_connections"
    assert names[-1] == "mysql_info_schema_client_statistics_empty_queries_total"


def test_unknown_column_is_untyped():
    db = FakeConnection(
        {
            USERSTAT_CHECK_QUERY: _userstat("ON"),
            CLIENT_STAT_QUERY: (["CLIENT", "NEW_COUNTER"], [("app", 7)]),
        }
    )
    [metric] = list(ScrapeClientStat().scrape(db))
    assert metric.name == "mysql_info_schema_client_statistics_new_counter"
    assert metric.value_type is ValueType.UNTYPED
    assert metric.value == 7.0
    assert dict(metric.labels) == {"client": "app"}
    assert metric.desc.help == "Unsupported metric from column NEW_COUNTER"


def test_userstat_off_yields_nothing():
    db = FakeConnection({USERSTAT_CHECK_QUERY: _userstat("OFF")})
    assert list(ScrapeClientStat().scrape(db)) == []
    assert db.executed == [USERSTAT_CHECK_QUERY]


def test_userstat_query_failure_yields_nothing():
    db = FakeConnection({})
    assert list(ScrapeClientStat().scrape(db)) == []
    assert db.executed == [USERSTAT_CHECK_QUERY]


def test_userstat_without_rows_yields_nothing():
    db = FakeConnection({USERSTAT_CHECK_QUERY: (["Variable_name", "Value"], [])})
    assert list(ScrapeClientStat().scrape(db)) == []


def test_non_numeric_value_raises():
    db = FakeConnection(
        {
            USERSTAT_CHECK_QUERY: _userstat("ON"),
            CLIENT_STAT_QUERY: (["CLIENT", "TOTAL_CONNECTIONS"], [("app", "many")]),
        }
    )
    with pytest.raises(ValueError):
        list(ScrapeClientStat().scrape(db))


def test_scraper_identity():
    scraper = ScrapeClientStat()
    assert scraper.name == "info_schema.clientstats"
    assert scraper.version == 5.5