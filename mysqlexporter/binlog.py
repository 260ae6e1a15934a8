"""Scrape ``SHOW BINARY LOGS``."""

from __future__ import annotations

from typing import Any, Iterator

from .collector import NAMESPACE, Scraper, _as_uint, _parse_float, _text, fetch_rows
from .metrics import Desc, Metric, ValueType, build_fq_name

SUBSYSTEM = "binlog"
LOGBIN_QUERY = "SELECT @@log_bin"
BINLOG_QUERY = "SHOW BINARY LOGS"

BINLOG_SIZE_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "size_bytes"),
    "Combined size of all registered binlog files.",
)
BINLOG_FILES_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "files"),
    "Number of registered binlog files.",
)
BINLOG_FILE_NUMBER_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "file_number"),
    "The last binlog file number.",
)


class ScrapeBinlogSize(Scraper):
    """Collects the combined size and count of registered binlog files."""

    name = "binlog_size"
    help = "Collect the current size of all registered binlog files"
    version = 5.1

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch_rows(db, LOGBIN_QUERY)
        if not rows:
            raise LookupError(f"{LOGBIN_QUERY} returned no rows")
        log_bin = _as_uint(rows[0][0])
        if log_bin is None or log_bin > 255:
            raise ValueError(f"unexpected @@log_bin value {rows[0][0]!r}")
        # SHOW BINARY LOGS fails outright when binary logging is off.
        if log_bin == 0:
            return

        columns, rows = fetch_rows(db, BINLOG_QUERY)
        size = 0
        count = 0
        filename = ""
        for row in rows:
            if len(columns) not in (2, 3):
                raise ValueError(f"invalid number of columns: {len(columns)}")
            filesize = _as_uint(row[1])
            if filesize is None:
                # An unreadable row ends the scrape without metrics or error.
                return
            filename = _text(row[0])
            size += filesize
            count += 1

        yield BINLOG_SIZE_DESC.metric(ValueType.GAUGE, size)
        yield BINLOG_FILES_DESC.metric(ValueType.GAUGE, count)
        # The last row holds the most recent binlog file.
        parts = filename.split(".")
        if len(parts) < 2:
            raise ValueError(f"cannot read a file number from binlog name {filename!r}")
        number = _parse_float(parts[1])
        yield BINLOG_FILE_NUMBER_DESC.metric(ValueType.GAUGE, number if number is not None else 0.0)