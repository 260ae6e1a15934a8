"""Metric descriptors and constant metric samples."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Mapping

_METRIC_NAME_RE = re.compile(r"[a-zA-Z_:][a-zA-Z0-9_:]*")
_LABEL_NAME_RE = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")
_RESERVED_LABEL_PREFIX = "__"


class ValueType(enum.Enum):
    """Kind of value a metric sample carries."""

    COUNTER = "counter"
    GAUGE = "gauge"
    UNTYPED = "untyped"


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty name parts with underscores; an empty name gives ''."""
    if not name:
        return ""
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class Desc:
    """Describes a metric: its full name, help text and variable label names."""

    fq_name: str
    help: str
    variable_labels: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "variable_labels", tuple(self.variable_labels))
        if not _METRIC_NAME_RE.fullmatch(self.fq_name):
            raise ValueError(f"{self.fq_name!r} is not a valid metric name")
        seen: set[str] = set()
        for label in self.variable_labels:
            if not _LABEL_NAME_RE.fullmatch(label) or label.startswith(_RESERVED_LABEL_PREFIX):
                raise ValueError(f"{label!r} is not a valid label name for metric {self.fq_name!r}")
            if label in seen:
                raise ValueError(f"duplicate label name {label!r} for metric {self.fq_name!r}")
            seen.add(label)

    def metric(self, value_type: ValueType | str, value: float, *args: str) -> Metric:
        """Create a sample of this metric; one label value per variable label."""
        if len(args) != len(self.variable_labels):
            raise ValueError(
                f"inconsistent label cardinality for {self.fq_name!r}: "
                f"expected {len(self.variable_labels)} label values but got {len(args)}"
            )
        return Metric(
            desc=self,
            value_type=ValueType(value_type),
            value=float(value),
            labels=dict(zip(self.variable_labels, args)),
        )


@dataclass(frozen=True)
class Metric:
    """A single constant metric sample."""

    desc: Desc
    value_type: ValueType
    value: float
    labels: Mapping[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.desc.fq_name