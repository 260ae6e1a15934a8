"""Shared scraper interface and parsing helpers."""

from __future__ import annotations

import abc
import math
import re
from contextlib import closing
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Iterator

from .metrics import Desc, Metric, build_fq_name

NAMESPACE = "mysql"
INFORMATION_SCHEMA = "info_schema"
PICO_SECONDS = 1e12
USERSTAT_CHECK_QUERY = """SHOW GLOBAL VARIABLES WHERE Variable_Name='userstat'
		OR Variable_Name='userstat_running'"""

_LOG_RE = re.compile(r".+\.(\d+)\Z", re.ASCII)
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?)|nan",
    re.ASCII | re.IGNORECASE,
)
_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)
_UINT_RE = re.compile(r"\d+", re.ASCII)
_NAME_RE = re.compile(r"[^a-zA-Z0-9_]")
_SYSLOG_TIME_RE = re.compile(
    r"([A-Za-z]{3}) (\d{2}) (\d{1,2}):(\d{2}):(\d{2}) (\d{4}) ([A-Z]{3,5})", re.ASCII
)
_SQL_TIME_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2}) (\d{1,2}):(\d{2}):(\d{2})", re.ASCII)
_MONTHS = {
    name: number
    for number, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}
_STATUS_WORDS = {
    "yes": 1.0,
    "on": 1.0,
    "no": 0.0,
    "off": 0.0,
    "disabled": 0.0,
    # Slave_IO_Running reports "Connecting" while not running.
    "connecting": 0.0,
    # wsrep_cluster_status values.
    "primary": 1.0,
    "non-primary": 0.0,
    "disconnected": 0.0,
}


@dataclass
class TransactionDetail:
    start: int
    end: int


@dataclass
class GlobalTransactionIdentifier:
    server_id: str
    first_transaction: int
    last_transaction: int
    transactions: list[TransactionDetail] = field(default_factory=list)


class Scraper(abc.ABC):
    """A source of metrics read from one MySQL connection."""

    name: ClassVar[str]
    help: ClassVar[str]
    version: ClassVar[float]

    @abc.abstractmethod
    def scrape(self, db: Any) -> Iterator[Metric]:
        """Yield metrics read through the DB-API connection ``db``."""


def fetch_rows(db: Any, query: str) -> tuple[list[str], list[tuple]]:
    """Run ``query`` and return its column names and all of its rows."""
    with closing(db.cursor()) as cursor:
        cursor.execute(query)
        columns = [column[0] for column in cursor.description or ()]
        rows = [tuple(row) for row in cursor.fetchall()]
    return columns, rows


def new_desc(subsystem: str, name: str, help: str) -> Desc:
    """A label-less descriptor in the exporter namespace."""
    return Desc(build_fq_name(NAMESPACE, subsystem, name), help)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _parse_float(text: str) -> float | None:
    if not _FLOAT_RE.fullmatch(text):
        return None
    value = float(text)
    if math.isinf(value) and "inf" not in text.lower():
        return None
    return value


def _parse_int(text: str) -> int | None:
    return int(text) if _INT_RE.fullmatch(text) else None


def _as_uint(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    text = _text(value)
    return int(text) if _UINT_RE.fullmatch(text) else None


def _timestamp(year: int, month: int, day: int, hour: int, minute: int, second: int) -> float | None:
    try:
        moment = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    except ValueError:
        return None
    return moment.timestamp()


def _parse_syslog_time(text: str) -> float | None:
    match = _SYSLOG_TIME_RE.fullmatch(text)
    if not match:
        return None
    month = _MONTHS.get(match[1].lower())
    if month is None:
        return None
    return _timestamp(int(match[6]), month, int(match[2]), int(match[3]), int(match[4]), int(match[5]))


def _parse_sql_time(text: str) -> float | None:
    match = _SQL_TIME_RE.fullmatch(text)
    if not match:
        return None
    year, month, day, hour, minute, second = (int(part) for part in match.groups())
    return _timestamp(year, month, day, hour, minute, second)


def parse_status(data: Any) -> float | None:
    """Interpret a status or variable value as a number, or None if it is not one."""
    text = _text(data)
    word = _STATUS_WORDS.get(text.lower())
    if word is not None:
        return word
    for parse_time in (_parse_syslog_time, _parse_sql_time):
        moment = parse_time(text)
        if moment is not None:
            return moment
    match = _LOG_RE.search(text)
    if match:
        return _parse_float(match[0])
    return _parse_float(text)


def parse_privilege(data: Any) -> float | None:
    """Map a 'Y'/'N' privilege flag to 1.0/0.0; anything else gives None."""
    return {"Y": 1.0, "N": 0.0}.get(_text(data))


def parse_gtid(s: str) -> list[GlobalTransactionIdentifier]:
    """Parse a GTID set such as ``uuid:1-5:7, uuid2:1-19``."""
    result = []
    for raw_item in s.split(","):
        item = raw_item.strip()
        server_id, *ranges = item.split(":")
        if not ranges:
            raise ValueError(f"can not parse gtid: {item}, transaction item is too little")
        transactions = []
        for interval in ranges:
            bounds = interval.split("-")
            if len(bounds) > 2:
                raise ValueError(f"can not parse gtid: {item}, cut by '-' more than 2 item")
            start = _parse_int(bounds[0])
            if start is None:
                raise ValueError(f"parse {bounds[0]!r} to int failed")
            end = start if len(bounds) == 1 else _parse_int(bounds[1])
            if end is None:
                raise ValueError(f"parse {bounds[1]!r} to int failed")
            transactions.append(TransactionDetail(start=start, end=end))
        result.append(
            GlobalTransactionIdentifier(
                server_id=server_id,
                first_transaction=transactions[0].start,
                last_transaction=transactions[-1].end,
                transactions=transactions,
            )
        )
    return result


def valid_prometheus_name(s: str) -> str:
    """Replace characters not allowed in metric names with '_' and lower-case."""
    return _NAME_RE.sub("_", s).lower()