"""Scrape ``information_schema.INNODB_CMPMEM``."""

from __future__ import annotations

from typing import Any, Iterator

from .collector import INFORMATION_SCHEMA, NAMESPACE, Scraper, _text, fetch_rows
from .info_schema_auto_increment import _as_float
from .metrics import Desc, Metric, ValueType, build_fq_name

INNODB_CMPMEM_QUERY = """
                SELECT
                  page_size, buffer_pool_instance, pages_used, pages_free, relocation_ops, relocation_time
                  FROM information_schema.innodb_cmpmem
                """


def _cmpmem_desc(name: str, help_text: str) -> Desc:
    return Desc(
        build_fq_name(NAMESPACE, INFORMATION_SCHEMA, name),
        help_text,
        ("page_size", "buffer_pool"),
    )


PAGES_USED_DESC = _cmpmem_desc(
    "innodb_cmpmem_pages_used_total",
    "Number of blocks of the size PAGE_SIZE that are currently in use.",
)
PAGES_FREE_DESC = _cmpmem_desc(
    "innodb_cmpmem_pages_free_total",
    "Number of blocks of the size PAGE_SIZE that are currently available for allocation.",
)
RELOCATION_OPS_DESC = _cmpmem_desc(
    "innodb_cmpmem_relocation_ops_total",
    "Number of times a block of the size PAGE_SIZE has been relocated.",
)
RELOCATION_TIME_DESC = _cmpmem_desc(
    "innodb_cmpmem_relocation_time_seconds_total",
    "Total time in seconds spent in relocating blocks.",
)


class ScrapeInnodbCmpMem(Scraper):
    """Collects InnoDB compressed buffer pool statistics."""

    name = INFORMATION_SCHEMA + ".innodb_cmpmem"
    help = "Collect metrics from information_schema.innodb_cmpmem"
    version = 5.5

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch_rows(db, INNODB_CMPMEM_QUERY)
        for row in rows:
            if len(row) != 6:
                raise ValueError(f"expected 6 columns, got {len(row)}")
            if row[0] is None or row[1] is None:
                raise ValueError("page_size or buffer_pool_instance is NULL")
            page_size, buffer_pool = _text(row[0]), _text(row[1])
            pages_used, pages_free, relocation_ops, relocation_time = (
                _as_float(value) for value in row[2:]
            )
            labels = (page_size, buffer_pool)
            yield PAGES_USED_DESC.metric(ValueType.COUNTER, pages_used, *labels)
            yield PAGES_FREE_DESC.metric(ValueType.COUNTER, pages_free, *labels)
            yield RELOCATION_OPS_DESC.metric(ValueType.COUNTER, relocation_ops, *labels)
            # relocation_time is reported in milliseconds.
            yield RELOCATION_TIME_DESC.metric(ValueType.COUNTER, relocation_time / 1000, *labels)