"""Scrape ``information_schema.innodb_sys_tablespaces``."""

from __future__ import annotations

from typing import Any, Iterator

from .collector import INFORMATION_SCHEMA, NAMESPACE, Scraper, _as_uint, _text, fetch_rows
from .metrics import Desc, Metric, ValueType, build_fq_name

INNODB_TABLESPACES_TABLENAME_QUERY = """
	SELECT
	    table_name
	  FROM information_schema.tables
	  WHERE table_name = 'INNODB_SYS_TABLESPACES'
	    OR table_name = 'INNODB_TABLESPACES'
	"""

INNODB_TABLESPACES_QUERY = """
	SELECT
	    SPACE,
	    NAME,
	    ifnull((SELECT column_name
			FROM information_schema.COLUMNS
			WHERE TABLE_SCHEMA = 'information_schema'
			  AND TABLE_NAME = '{table}'
			  AND COLUMN_NAME = 'FILE_FORMAT' LIMIT 1), 'NONE') as FILE_FORMAT,
	    ifnull(ROW_FORMAT, 'NONE') as ROW_FORMAT,
	    ifnull(SPACE_TYPE, 'NONE') as SPACE_TYPE,
	    FILE_SIZE,
	    ALLOCATED_SIZE
	  FROM information_schema.`{table}`"""

TABLESPACE_INFO_DESC = Desc(
    build_fq_name(NAMESPACE, INFORMATION_SCHEMA, "innodb_tablespace_space_info"),
    "The Tablespace information and Space ID.",
    ("tablespace_name", "file_format", "row_format", "space_type"),
)
TABLESPACE_FILE_SIZE_DESC = Desc(
    build_fq_name(NAMESPACE, INFORMATION_SCHEMA, "innodb_tablespace_file_size_bytes"),
    "The apparent size of the file, which represents the maximum size of the file, uncompressed.",
    ("tablespace_name",),
)
TABLESPACE_ALLOCATED_SIZE_DESC = Desc(
    build_fq_name(NAMESPACE, INFORMATION_SCHEMA, "innodb_tablespace_allocated_size_bytes"),
    "The actual size of the file, which is the amount of space allocated on disk.",
    ("tablespace_name",),
)

_TABLESPACE_TABLES = frozenset({"INNODB_SYS_TABLESPACES", "INNODB_TABLESPACES"})


def _unsigned(value: Any, bits: int, column: str) -> int:
    number = _as_uint(value)
    if number is None or number >= 1 << bits:
        raise ValueError(f"cannot read {value!r} in column {column} as an unsigned {bits}-bit integer")
    return number


class ScrapeInfoSchemaInnodbTablespaces(Scraper):
    """Collects InnoDB tablespace information and file sizes."""

    name = INFORMATION_SCHEMA + ".innodb_tablespaces"
    help = "Collect metrics from information_schema.innodb_sys_tablespaces"
    version = 5.7

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch_rows(db, INNODB_TABLESPACES_TABLENAME_QUERY)
        if not rows:
            raise LookupError("no rows in result set")
        table = _text(rows[0][0])
        if table not in _TABLESPACE_TABLES:
            raise ValueError(
                "Couldn't find INNODB_SYS_TABLESPACES or INNODB_TABLESPACES in information_schema."
            )

        _, rows = fetch_rows(db, INNODB_TABLESPACES_QUERY.format(table=table))
        for row in rows:
            if len(row) != 7:
                raise ValueError(f"expected 7 columns, got {len(row)}")
            if None in row[1:5]:
                raise ValueError(f"unexpected NULL in tablespace row {row!r}")
            space = _unsigned(row[0], 32, "SPACE")
            table_name, file_format, row_format, space_type = (_text(part) for part in row[1:5])
            file_size = _unsigned(row[5], 64, "FILE_SIZE")
            allocated_size = _unsigned(row[6], 64, "ALLOCATED_SIZE")

            yield TABLESPACE_INFO_DESC.metric(
                ValueType.GAUGE, space, table_name, file_format, row_format, space_type
            )
            yield TABLESPACE_FILE_SIZE_DESC.metric(ValueType.GAUGE, file_size, table_name)
            yield TABLESPACE_ALLOCATED_SIZE_DESC.metric(ValueType.GAUGE, allocated_size, table_name)