"""Scrape ``information_schema.innodb_metrics``."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterator

from .collector import INFORMATION_SCHEMA, NAMESPACE, Scraper, _text, fetch_rows
from .info_schema_auto_increment import _as_float
from .metrics import Desc, Metric, ValueType, build_fq_name

logger = logging.getLogger(__name__)

INFO_SCHEMA_INNODB_METRICS_ENABLED_COLUMN_QUERY = """
	SELECT
	    column_name
	  FROM information_schema.columns
	  WHERE table_schema = 'information_schema'
	    AND table_name = 'INNODB_METRICS'
	    AND column_name IN ('status', 'enabled')
	  LIMIT 1
	"""

INFO_SCHEMA_INNODB_METRICS_QUERY = """
		SELECT
		  name, subsystem, type, comment,
		  count
		  FROM information_schema.innodb_metrics
		  WHERE `{column}` = '{value}'"""

BUFFER_PAGE_READ_TOTAL_DESC = Desc(
    build_fq_name(NAMESPACE, INFORMATION_SCHEMA, "innodb_metrics_buffer_page_read_total"),
    "Total number of buffer pages read total.",
    ("type",),
)
BUFFER_PAGE_WRITTEN_TOTAL_DESC = Desc(
    build_fq_name(NAMESPACE, INFORMATION_SCHEMA, "innodb_metrics_buffer_page_written_total"),
    "Total number of buffer pages written total.",
    ("type",),
)
BUFFER_POOL_PAGES_DESC = Desc(
    build_fq_name(NAMESPACE, INFORMATION_SCHEMA, "innodb_metrics_buffer_pool_pages"),
    "Total number of buffer pool pages by state.",
    ("state",),
)
BUFFER_POOL_PAGES_DIRTY_DESC = Desc(
    build_fq_name(NAMESPACE, INFORMATION_SCHEMA, "innodb_metrics_buffer_pool_dirty_pages"),
    "Total number of dirty pages in the buffer pool.",
)

_BUFFER_RE = re.compile(r"buffer_(pool_pages)_(.*)")
_BUFFER_PAGE_RE = re.compile(r"buffer_page_(read|written)_(.*)")

# The name of the "enabled" column differs between server versions.
_ENABLED_FILTERS = {
    "STATUS": ("status", "enabled"),
    "ENABLED": ("enabled", "1"),
}


def _metrics_query(db: Any) -> str:
    _, rows = fetch_rows(db, INFO_SCHEMA_INNODB_METRICS_ENABLED_COLUMN_QUERY)
    if not rows:
        raise LookupError("no rows in result set")
    column_name = _text(rows[0][0])
    try:
        column, value = _ENABLED_FILTERS[column_name]
    except KeyError:
        raise ValueError("Couldn't find column STATUS or ENABLED in innodb_metrics table.") from None
    return INFO_SCHEMA_INNODB_METRICS_QUERY.format(column=column, value=value)


def _row_metric(name: str, subsystem: str, metric_type: str, comment: str, value: float) -> Metric | None:
    if subsystem == "buffer_page_io":
        match = _BUFFER_PAGE_RE.fullmatch(name)
        if match is None:
            logger.warning("innodb_metrics subsystem buffer_page_io returned an invalid name: %s", name)
            return None
        desc = BUFFER_PAGE_READ_TOTAL_DESC if match[1] == "read" else BUFFER_PAGE_WRITTEN_TOTAL_DESC
        return desc.metric(ValueType.COUNTER, value, match[2])

    if subsystem == "buffer":
        match = _BUFFER_RE.fullmatch(name)
        # Unmatched buffer metrics fall through to the generic metric.
        if match is not None:
            state = match[2]
            if state == "total":
                # An aggregation of the other states.
                return None
            if state == "dirty":
                return BUFFER_POOL_PAGES_DIRTY_DESC.metric(ValueType.GAUGE, value)
            return BUFFER_POOL_PAGES_DESC.metric(ValueType.GAUGE, value, state)

    metric_name = f"innodb_metrics_{subsystem}_{name}"
    # Counters come as "counter" or "status_counter"; negative values occur through server bugs.
    if metric_type in ("counter", "status_counter") and value >= 0:
        desc = Desc(build_fq_name(NAMESPACE, INFORMATION_SCHEMA, metric_name + "_total"), comment)
        return desc.metric(ValueType.COUNTER, value)
    desc = Desc(build_fq_name(NAMESPACE, INFORMATION_SCHEMA, metric_name), comment)
    return desc.metric(ValueType.GAUGE, value)


class ScrapeInnodbMetrics(Scraper):
    """Collects every enabled InnoDB metric."""

    name = INFORMATION_SCHEMA + ".innodb_metrics"
    help = "Collect metrics from information_schema.innodb_metrics"
    version = 5.6

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch_rows(db, _metrics_query(db))
        for row in rows:
            if len(row) != 5:
                raise ValueError(f"expected 5 columns, got {len(row)}")
            if None in row[:4]:
                raise ValueError(f"unexpected NULL in innodb_metrics row {row!r}")
            name, subsystem, metric_type, comment = (_text(part) for part in row[:4])
            metric = _row_metric(name, subsystem, metric_type, comment, _as_float(row[4]))
            if metric is not None:
                yield metric