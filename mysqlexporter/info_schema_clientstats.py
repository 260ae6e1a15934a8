"""Scrape ``information_schema.client_statistics``."""

from __future__ import annotations

import logging
from typing import Any, Iterator

from .collector import (
    INFORMATION_SCHEMA,
    NAMESPACE,
    USERSTAT_CHECK_QUERY,
    Scraper,
    _text,
    fetch_rows,
)
from .info_schema_auto_increment import _as_float
from .metrics import Desc, Metric, ValueType, build_fq_name

CLIENT_STAT_QUERY = "SELECT * FROM information_schema.client_statistics"

logger = logging.getLogger(__name__)


def _client_desc(name: str, help_text: str) -> Desc:
    return Desc(
        build_fq_name(NAMESPACE, INFORMATION_SCHEMA, f"client_statistics_{name}"),
        help_text,
        ("client",),
    )


# Known client-statistics columns; unknown columns are reported as untyped.
CLIENT_STATISTICS_TYPES: dict[str, tuple[ValueType, Desc]] = {
    "TOTAL_CONNECTIONS": (
        ValueType.COUNTER,
        _client_desc("total_connections", "The number of connections created for this client."),
    ),
    "CONCURRENT_CONNECTIONS": (
        ValueType.GAUGE,
        _client_desc("concurrent_connections", "The number of concurrent connections for this client."),
    ),
    "CONNECTED_TIME": (
        ValueType.COUNTER,
        _client_desc(
            "connected_time_seconds_total",
            "The cumulative number of seconds elapsed while there were connections from this client.",
        ),
    ),
    "BUSY_TIME": (
        ValueType.COUNTER,
        _client_desc(
            "busy_seconds_total",
            "The cumulative number of seconds there was activity on connections from this client.",
        ),
    ),
    "CPU_TIME": (
        ValueType.COUNTER,
        _client_desc(
            "cpu_time_seconds_total",
            "The cumulative CPU time elapsed, in seconds, while servicing this client's connections.",
        ),
    ),
    "BYTES_RECEIVED": (
        ValueType.COUNTER,
        _client_desc("bytes_received_total", "The number of bytes received from this client’s connections."),
    ),
    "BYTES_SENT": (
        ValueType.COUNTER,
        _client_desc("bytes_sent_total", "The number of bytes sent to this client’s connections."),
    ),
    "BINLOG_BYTES_WRITTEN": (
        ValueType.COUNTER,
        _client_desc(
            "binlog_bytes_written_total",
            "The number of bytes written to the binary log from this client’s connections.",
        ),
    ),
    "ROWS_READ": (
        ValueType.COUNTER,
        _client_desc("rows_read_total", "The number of rows read by this client’s connections."),
    ),
    "ROWS_SENT": (
        ValueType.COUNTER,
        _client_desc("rows_sent_total", "The number of rows sent by this client’s connections."),
    ),
    "ROWS_DELETED": (
        ValueType.COUNTER,
        _client_desc("rows_deleted_total", "The number of rows deleted by this client’s connections."),
    ),
    "ROWS_INSERTED": (
        ValueType.COUNTER,
        _client_desc("rows_inserted_total", "The number of rows inserted by this client’s connections."),
    ),
    "ROWS_FETCHED": (
        ValueType.COUNTER,
        _client_desc("rows_fetched_total", "The number of rows fetched by this client’s connections."),
    ),
    "ROWS_UPDATED": (
        ValueType.COUNTER,
        _client_desc("rows_updated_total", "The number of rows updated by this client’s connections."),
    ),
    "TABLE_ROWS_READ": (
        ValueType.COUNTER,
        _client_desc(
            "table_rows_read_total",
            "The number of rows read from tables by this client’s connections. "
            "(It may be different from ROWS_FETCHED.)",
        ),
    ),
    "SELECT_COMMANDS": (
        ValueType.COUNTER,
        _client_desc(
            "select_commands_total",
            "The number of SELECT commands executed from this client’s connections.",
        ),
    ),
    "UPDATE_COMMANDS": (
        ValueType.COUNTER,
        _client_desc(
            "update_commands_total",
            "The number of UPDATE commands executed from this client’s connections.",
        ),
    ),
    "OTHER_COMMANDS": (
        ValueType.COUNTER,
        _client_desc(
            "other_commands_total",
            "The number of other commands executed from this client’s connections.",
        ),
    ),
    "COMMIT_TRANSACTIONS": (
        ValueType.COUNTER,
        _client_desc(
            "commit_transactions_total",
            "The number of COMMIT commands issued by this client’s connections.",
        ),
    ),
    "ROLLBACK_TRANSACTIONS": (
        ValueType.COUNTER,
        _client_desc(
            "rollback_transactions_total",
            "The number of ROLLBACK commands issued by this client’s connections.",
        ),
    ),
    "DENIED_CONNECTIONS": (
        ValueType.COUNTER,
        _client_desc("denied_connections_total", "The number of connections denied to this client."),
    ),
    "LOST_CONNECTIONS": (
        ValueType.COUNTER,
        _client_desc(
            "lost_connections_total",
            "The number of this client’s connections that were terminated uncleanly.",
        ),
    ),
    "ACCESS_DENIED": (
        ValueType.COUNTER,
        _client_desc(
            "access_denied_total",
            "The number of times this client’s connections issued commands that were denied.",
        ),
    ),
    "EMPTY_QUERIES": (
        ValueType.COUNTER,
        _client_desc(
            "empty_queries_total",
            "The number of times this client’s connections sent empty queries to the server.",
        ),
    ),
    "TOTAL_SSL_CONNECTIONS": (
        ValueType.COUNTER,
        _client_desc(
            "total_ssl_connections_total",
            "The number of times this client’s connections connected using SSL to the server.",
        ),
    ),
    "MAX_STATEMENT_TIME_EXCEEDED": (
        ValueType.COUNTER,
        _client_desc(
            "max_statement_time_exceeded_total",
            "The number of times a statement was aborted, because it was executed longer than "
            "its MAX_STATEMENT_TIME threshold.",
        ),
    ),
}


def _userstat_enabled(db: Any) -> bool:
    try:
        _, rows = fetch_rows(db, USERSTAT_CHECK_QUERY)
    except Exception as err:  # any failure means the statistics are unavailable
        logger.debug("Detailed client stats are not available: %s", err)
        return False
    if not rows or len(rows[0]) != 2 or None in rows[0]:
        logger.debug("Detailed client stats are not available.")
        return False
    var_name, var_value = (_text(part) for part in rows[0])
    if var_value == "OFF":
        logger.debug("MySQL variable %s is OFF.", var_name)
        return False
    return True


class ScrapeClientStat(Scraper):
    """Collects per-client statistics when userstat is enabled."""

    name = "info_schema.clientstats"
    help = "If running with userstat=1, set to true to collect client statistics"
    version = 5.5

    def scrape(self, db: Any) -> Iterator[Metric]:
        if not _userstat_enabled(db):
            return

        # The first column holds the client; every other column is numeric.
        columns, rows = fetch_rows(db, CLIENT_STAT_QUERY)
        for row in rows:
            if len(row) != len(columns):
                raise ValueError(f"expected {len(columns)} columns, got {len(row)}")
            client = _text(row[0])
            values = [_as_float(value) for value in row[1:]]
            for column, value in zip(columns[1:], values):
                known = CLIENT_STATISTICS_TYPES.get(column)
                if known is not None:
                    value_type, desc = known
                    yield desc.metric(value_type, value, client)
                else:
                    desc = _client_desc(column.lower(), f"Unsupported metric from column {column}")
                    yield desc.metric(ValueType.UNTYPED, value, client)