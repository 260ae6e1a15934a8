"""Scrape ``SHOW ENGINE TOKUDB STATUS``."""

from __future__ import annotations

from typing import Any, Iterator

from .collector import Scraper, _text, fetch_rows, new_desc, parse_status
from .metrics import Metric, ValueType

SUBSYSTEM = "engine_tokudb"
ENGINE_TOKUDB_STATUS_QUERY = "SHOW ENGINE TOKUDB STATUS"

_REPLACEMENTS = str.maketrans(
    {
        ">": "",
        ",": "",
        ":": "",
        "(": "",
        ")": "",
        " ": "_",
        "-": "_",
        "+": "and",
        "/": "and",
    }
)


def sanitize_tokudb_metric(metric_name: str) -> str:
    """Turn a TokuDB status label into a metric name fragment."""
    return metric_name.translate(_REPLACEMENTS)


class ScrapeEngineTokudbStatus(Scraper):
    """Collects every numeric value from the TokuDB engine status."""

    name = "engine_tokudb_status"
    help = "Collect from SHOW ENGINE TOKUDB STATUS"
    version = 5.6

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch_rows(db, ENGINE_TOKUDB_STATUS_QUERY)
        for row in rows:
            if len(row) != 3:
                raise ValueError(f"expected 3 columns, got {len(row)}")
            _, key, value = row
            number = parse_status(value)
            if number is None:
                continue
            yield new_desc(
                SUBSYSTEM,
                sanitize_tokudb_metric(_text(key).lower()),
                "Generic metric from SHOW ENGINE TOKUDB STATUS.",
            ).metric(ValueType.UNTYPED, number)