"""Scrape auto_increment column information."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterator

from .collector import INFORMATION_SCHEMA, NAMESPACE, Scraper, _parse_float, _text, fetch_rows
from .metrics import Desc, Metric, ValueType, build_fq_name

# Number of value bits of each signed integer type; unsigned columns get one more.
_SIGNED_VALUE_BITS = (
    ("tinyint", 7),
    ("smallint", 15),
    ("mediumint", 23),
    ("int", 31),
    ("bigint", 63),
)

_BITS_EXPR = (
    "case data_type "
    + " ".join(f"when '{type_name}' then {bits}" for type_name, bits in _SIGNED_VALUE_BITS)
    + " end"
)

INFO_SCHEMA_AUTO_INCREMENT_QUERY = (
    "SELECT table_schema, table_name, column_name, auto_increment, "
    f"pow(2, {_BITS_EXPR}+(column_type like '% unsigned'))-1 as max_int "
    "FROM information_schema.tables t "
    "JOIN information_schema.columns c USING (table_schema,table_name) "
    "WHERE c.extra = 'auto_increment' AND t.auto_increment IS NOT NULL"
)

AUTO_INCREMENT_DESC = Desc(
    build_fq_name(NAMESPACE, INFORMATION_SCHEMA, "auto_increment_column"),
    "The current value of an auto_increment column from information_schema.",
    ("schema", "table", "column"),
)
AUTO_INCREMENT_MAX_DESC = Desc(
    build_fq_name(NAMESPACE, INFORMATION_SCHEMA, "auto_increment_column_max"),
    "The max value of an auto_increment column from information_schema.",
    ("schema", "table", "column"),
)


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"cannot read {value!r} as a number")
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    number = _parse_float(_text(value))
    if number is None:
        raise ValueError(f"cannot read {value!r} as a number")
    return number


class ScrapeAutoIncrementColumns(Scraper):
    """Collects current and maximum values of auto_increment columns."""

    name = "auto_increment.columns"
    help = "Collect auto_increment columns and max values from information_schema"
    version = 5.1

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch_rows(db, INFO_SCHEMA_AUTO_INCREMENT_QUERY)
        for row in rows:
            if len(row) != 5:
                raise ValueError(f"expected 5 columns, got {len(row)}")
            schema, table, column = (_text(part) for part in row[:3])
            value = _as_float(row[3])
            maximum = _as_float(row[4])
            yield AUTO_INCREMENT_DESC.metric(ValueType.GAUGE, value, schema, table, column)
            yield AUTO_INCREMENT_MAX_DESC.metric(ValueType.GAUGE, maximum, schema, table, column)