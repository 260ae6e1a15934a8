"""Scrape ``SHOW GLOBAL STATUS``."""

from __future__ import annotations

import re
from typing import Any, Iterator, NamedTuple

from .collector import (
    NAMESPACE,
    Scraper,
    _parse_float,
    _text,
    fetch_rows,
    new_desc,
    parse_status,
    valid_prometheus_name,
)
from .metrics import Desc, Metric, ValueType, build_fq_name

SUBSYSTEM = "global_status"
GLOBAL_STATUS_QUERY = "SHOW GLOBAL STATUS"

# Groups of status variables that are reported as labelled metrics.
_GLOBAL_STATUS_RE = re.compile(
    r"(com|handler|connection_errors|innodb_buffer_pool_pages|innodb_rows|performance_schema)_(.*)"
)

GLOBAL_COMMANDS_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "commands_total"),
    "Total number of executed MySQL commands.",
    ("command",),
)
GLOBAL_HANDLER_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "handlers_total"),
    "Total number of executed MySQL handlers.",
    ("handler",),
)
GLOBAL_CONNECTION_ERRORS_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "connection_errors_total"),
    "Total number of MySQL connection errors.",
    ("error",),
)
GLOBAL_BUFFER_POOL_PAGES_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "buffer_pool_pages"),
    "Innodb buffer pool pages by state.",
    ("state",),
)
GLOBAL_BUFFER_POOL_DIRTY_PAGES_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "buffer_pool_dirty_pages"),
    "Innodb buffer pool dirty pages.",
)
GLOBAL_BUFFER_POOL_PAGE_CHANGES_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "buffer_pool_page_changes_total"),
    "Innodb buffer pool page state changes.",
    ("operation",),
)
GLOBAL_INNODB_ROW_OPS_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "innodb_row_ops_total"),
    "Total number of MySQL InnoDB row operations.",
    ("operation",),
)
GLOBAL_PERFORMANCE_SCHEMA_LOST_DESC = Desc(
    build_fq_name(NAMESPACE, SUBSYSTEM, "performance_schema_lost_total"),
    "Total number of MySQL instrumentations that could not be loaded or created due to memory constraints.",
    ("instrumentation",),
)
GALERA_STATUS_INFO_DESC = Desc(
    build_fq_name(NAMESPACE, "galera", "status_info"),
    "PXC/Galera status information.",
    ("wsrep_local_state_uuid", "wsrep_cluster_state_uuid", "wsrep_provider_version"),
)


class _EvsField(NamedTuple):
    name: str
    help: str


_EVS_FIELDS = (
    _EvsField("min_seconds", "PXC/Galera group communication latency. Min value."),
    _EvsField("avg_seconds", "PXC/Galera group communication latency. Avg value."),
    _EvsField("max_seconds", "PXC/Galera group communication latency. Max value."),
    _EvsField("stdev", "PXC/Galera group communication latency. Standard Deviation."),
    _EvsField("sample_size", "PXC/Galera group communication latency. Sample Size."),
)

_TEXT_ITEMS = (
    "wsrep_local_state_uuid",
    "wsrep_cluster_state_uuid",
    "wsrep_provider_version",
    "wsrep_evs_repl_latency",
)

_BUFFER_POOL_STATES = frozenset({"data", "free", "misc", "old"})


def _status_metric(key: str, value: float) -> Metric | None:
    match = _GLOBAL_STATUS_RE.fullmatch(key)
    if match is None:
        return new_desc(SUBSYSTEM, key, "Generic metric from SHOW GLOBAL STATUS.").metric(
            ValueType.UNTYPED, value
        )
    group, rest = match[1], match[2]
    if group == "com":
        return GLOBAL_COMMANDS_DESC.metric(ValueType.COUNTER, value, rest)
    if group == "handler":
        return GLOBAL_HANDLER_DESC.metric(ValueType.COUNTER, value, rest)
    if group == "connection_errors":
        return GLOBAL_CONNECTION_ERRORS_DESC.metric(ValueType.COUNTER, value, rest)
    if group == "innodb_buffer_pool_pages":
        if rest in _BUFFER_POOL_STATES:
            return GLOBAL_BUFFER_POOL_PAGES_DESC.metric(ValueType.GAUGE, value, rest)
        if rest == "dirty":
            return GLOBAL_BUFFER_POOL_DIRTY_PAGES_DESC.metric(ValueType.GAUGE, value)
        if rest == "total":
            return None
        return GLOBAL_BUFFER_POOL_PAGE_CHANGES_DESC.metric(ValueType.COUNTER, value, rest)
    if group == "innodb_rows":
        return GLOBAL_INNODB_ROW_OPS_DESC.metric(ValueType.COUNTER, value, rest)
    return GLOBAL_PERFORMANCE_SCHEMA_LOST_DESC.metric(ValueType.COUNTER, value, rest)


def _evs_latency_metrics(latency: str) -> Iterator[Metric]:
    parts = latency.split("/")
    if len(parts) != len(_EVS_FIELDS):
        return
    values = [_parse_float(part) for part in parts]
    if any(value is None for value in values):
        return
    for evs_field, value in zip(_EVS_FIELDS, values):
        desc = Desc(build_fq_name(NAMESPACE, "galera_evs_repl_latency", evs_field.name), evs_field.help)
        yield desc.metric(ValueType.GAUGE, value)


class ScrapeGlobalStatus(Scraper):
    """Collects every numeric server status variable, grouped where known."""

    name = SUBSYSTEM
    help = "Collect from SHOW GLOBAL STATUS"
    version = 5.1

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch_rows(db, GLOBAL_STATUS_QUERY)
        text_items = dict.fromkeys(_TEXT_ITEMS, "")

        for row in rows:
            if len(row) != 2:
                raise ValueError(f"expected 2 columns, got {len(row)}")
            key, raw_value = _text(row[0]), row[1]
            value = parse_status(raw_value)
            if value is not None:
                metric = _status_metric(valid_prometheus_name(key), value)
                if metric is not None:
                    yield metric
            elif key in text_items:
                text_items[key] = _text(raw_value)

        if text_items["wsrep_local_state_uuid"]:
            yield GALERA_STATUS_INFO_DESC.metric(
                ValueType.GAUGE,
                1,
                text_items["wsrep_local_state_uuid"],
                text_items["wsrep_cluster_state_uuid"],
                text_items["wsrep_provider_version"],
            )

        if text_items["wsrep_evs_repl_latency"]:
            yield from _evs_latency_metrics(text_items["wsrep_evs_repl_latency"])