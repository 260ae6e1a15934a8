"""Scrape ``information_schema.INNODB_CMP``."""

from __future__ import annotations

from typing import Any, Iterator

from .collector import INFORMATION_SCHEMA, NAMESPACE, Scraper, _text, fetch_rows
from .info_schema_auto_increment import _as_float
from .metrics import Desc, Metric, ValueType, build_fq_name

INNODB_CMP_QUERY = """
		SELECT
		  page_size, compress_ops, compress_ops_ok, compress_time, uncompress_ops, uncompress_time
		  FROM information_schema.innodb_cmp
		"""


def _cmp_desc(name: str, help_text: str) -> Desc:
    return Desc(build_fq_name(NAMESPACE, INFORMATION_SCHEMA, name), help_text, ("page_size",))


COMPRESS_OPS_DESC = _cmp_desc(
    "innodb_cmp_compress_ops_total",
    "Number of times a B-tree page of the size PAGE_SIZE has been compressed.",
)
COMPRESS_OPS_OK_DESC = _cmp_desc(
    "innodb_cmp_compress_ops_ok_total",
    "Number of times a B-tree page of the size PAGE_SIZE has been successfully compressed.",
)
COMPRESS_TIME_DESC = _cmp_desc(
    "innodb_cmp_compress_time_seconds_total",
    "Total time in seconds spent in attempts to compress B-tree pages.",
)
UNCOMPRESS_OPS_DESC = _cmp_desc(
    "innodb_cmp_uncompress_ops_total",
    "Number of times a B-tree page of the size PAGE_SIZE has been uncompressed.",
)
UNCOMPRESS_TIME_DESC = _cmp_desc(
    "innodb_cmp_uncompress_time_seconds_total",
    "Total time in seconds spent in uncompressing B-tree pages.",
)

_VALUE_DESCS = (
    COMPRESS_OPS_DESC,
    COMPRESS_OPS_OK_DESC,
    COMPRESS_TIME_DESC,
    UNCOMPRESS_OPS_DESC,
    UNCOMPRESS_TIME_DESC,
)


class ScrapeInnodbCmp(Scraper):
    """Collects InnoDB compression counters per page size."""

    name = INFORMATION_SCHEMA + ".innodb_cmp"
    help = "Collect metrics from information_schema.innodb_cmp"
    version = 5.5

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch_rows(db, INNODB_CMP_QUERY)
        for row in rows:
            if len(row) != 6:
                raise ValueError(f"expected 6 columns, got {len(row)}")
            if row[0] is None:
                raise ValueError("page_size is NULL")
            page_size = _text(row[0])
            values = [_as_float(value) for value in row[1:]]
            for desc, value in zip(_VALUE_DESCS, values):
                yield desc.metric(ValueType.COUNTER, value, page_size)