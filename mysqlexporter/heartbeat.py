"""Scrape heartbeat data written by pt-heartbeat or a compatible tool."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from .collector import NAMESPACE, Scraper, _parse_float, _parse_int, _text, fetch_rows
from .metrics import Desc, Metric, ValueType, build_fq_name

SUBSYSTEM = "heartbeat"
# The second column reads the server clock at the moment the query runs.
HEARTBEAT_QUERY = "SELECT UNIX_TIMESTAMP(ts), UNIX_TIMESTAMP({now}), server_id from `{database}`.`{table}`"

HEARTBEAT_STORED_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "stored_timestamp_seconds"),
    "Timestamp stored in the heartbeat table.",
    ("server_id",),
)
HEARTBEAT_NOW_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "now_timestamp_seconds"),
    "Timestamp of the current server.",
    ("server_id",),
)


@dataclass
class ScrapeHeartbeat(Scraper):
    """Reads a heartbeat table holding ``ts`` and ``server_id`` columns."""

    name = "heartbeat"
    help = "Collect from heartbeat"
    version = 5.1

    database: str = "heartbeat"
    table: str = "heartbeat"
    utc: bool = False

    def now_expr(self) -> str:
        """SQL expression for the current server timestamp."""
        return "UTC_TIMESTAMP(6)" if self.utc else "NOW(6)"

    def query(self) -> str:
        """The SQL statement that reads the heartbeat table."""
        return HEARTBEAT_QUERY.format(now=self.now_expr(), database=self.database, table=self.table)

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch_rows(db, self.query())
        for row in rows:
            if len(row) != 3:
                raise ValueError(f"expected 3 columns, got {len(row)}")
            raw_ts, raw_now, raw_server_id = row
            stored = _parse_float(_text(raw_ts))
            if stored is None:
                raise ValueError(f"invalid heartbeat timestamp {raw_ts!r}")
            now = _parse_float(_text(raw_now))
            if now is None:
                raise ValueError(f"invalid current timestamp {raw_now!r}")
            server_id = _parse_int(_text(raw_server_id))
            if server_id is None:
                raise ValueError(f"invalid server_id {raw_server_id!r}")

            label = str(server_id)
            yield HEARTBEAT_NOW_DESC.metric(ValueType.GAUGE, now, label)
            yield HEARTBEAT_STORED_DESC.metric(ValueType.GAUGE, stored, label)