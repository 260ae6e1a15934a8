"""Scrape ``SHOW ENGINE INNODB STATUS``."""

from __future__ import annotations

import re
from typing import Any, Iterator

from .collector import Scraper, _text, fetch_rows, new_desc
from .metrics import Metric, ValueType

SUBSYSTEM = "engine_innodb"
ENGINE_INNODB_STATUS_QUERY = "SHOW ENGINE INNODB STATUS"

_QUERIES_RE = re.compile(r"(\d+) queries inside InnoDB, (\d+) queries in queue", re.ASCII)
_VIEWS_RE = re.compile(r"(\d+) read views open inside InnoDB", re.ASCII)


class ScrapeEngineInnodbStatus(Scraper):
    """Collects query and read-view counts from the InnoDB monitor output."""

    name = "engine_innodb_status"
    help = "Collect from SHOW ENGINE INNODB STATUS"
    version = 5.1

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch_rows(db, ENGINE_INNODB_STATUS_QUERY)
        status = ""
        # Only the first row is expected to carry the monitor output.
        if rows:
            row = rows[0]
            if len(row) != 3:
                raise ValueError(f"expected 3 columns, got {len(row)}")
            status = _text(row[2])

        for line in status.split("\n"):
            if match := _QUERIES_RE.search(line):
                yield new_desc(SUBSYSTEM, "queries_inside_innodb", "Queries inside InnoDB.").metric(
                    ValueType.GAUGE, float(match[1])
                )
                yield new_desc(SUBSYSTEM, "queries_in_queue", "Queries in queue.").metric(
                    ValueType.GAUGE, float(match[2])
                )
            elif match := _VIEWS_RE.search(line):
                yield new_desc(
                    SUBSYSTEM, "read_views_open_inside_innodb", "Read views open inside InnoDB."
                ).metric(ValueType.GAUGE, float(match[1]))