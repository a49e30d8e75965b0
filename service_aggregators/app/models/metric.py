"""
Metric model and constructors.
"""

import math
from typing import Callable, Dict, Any, Optional, Union
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from shared.errors import MetricConstructionError

FieldValue = Union[bool, int, float, str]


class ValueType(str, Enum):
    """Metric value types."""
    COUNTER = "counter"
    GAUGE = "gauge"
    UNTYPED = "untyped"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Metric:
    """A single measurement with its tags and fields."""
    name: str
    tags: Dict[str, str]
    fields: Dict[str, FieldValue]
    timestamp: datetime = field(default_factory=_utcnow)
    value_type: ValueType = ValueType.UNTYPED
    # True when synthesized by an aggregator rather than ingested
    aggregate: bool = False

    def set_aggregate(self, aggregate: bool) -> None:
        self.aggregate = aggregate

    def is_aggregate(self) -> bool:
        return self.aggregate

    def copy(self) -> "Metric":
        """Return a copy that shares no mutable state with this metric."""
        return replace(self, tags=dict(self.tags), fields=dict(self.fields))


def _clean_fields(name: str, fields: Dict[str, Any]) -> Dict[str, FieldValue]:
    clean: Dict[str, FieldValue] = {}
    for key, value in fields.items():
        if not key:
            raise MetricConstructionError(
                "Field key cannot be empty",
                {"measurement": name}
            )
        if value is None:
            continue
        if isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                raise MetricConstructionError(
                    f"Field {key} has a non-finite value",
                    {"measurement": name, "field": key}
                )
        elif not isinstance(value, (bool, int, str)):
            raise MetricConstructionError(
                f"Field {key} has unsupported type {type(value).__name__}",
                {"measurement": name, "field": key}
            )
        clean[key] = value
    return clean


def _clean_tags(name: str, tags: Dict[str, Any]) -> Dict[str, str]:
    clean: Dict[str, str] = {}
    for key, value in tags.items():
        # Empty keys and values are not representable, skip them
        if not key or not value:
            continue
        if not isinstance(value, str):
            raise MetricConstructionError(
                f"Tag {key} must be a string",
                {"measurement": name, "tag": key}
            )
        clean[key] = value
    return clean


def _build(
    name: str,
    tags: Optional[Dict[str, str]],
    fields: Optional[Dict[str, Any]],
    timestamp: Optional[datetime],
    value_type: ValueType
) -> Metric:
    if not name:
        raise MetricConstructionError("Metric cannot be made with an empty name")

    clean_fields = _clean_fields(name, fields or {})
    if not clean_fields:
        raise MetricConstructionError(
            "Metric cannot be made without any fields",
            {"measurement": name}
        )

    clean_tags = _clean_tags(name, tags or {})
    collisions = sorted(set(clean_tags) & set(clean_fields))
    if collisions:
        raise MetricConstructionError(
            f"Keys used as both tag and field: {', '.join(collisions)}",
            {"measurement": name, "keys": collisions}
        )

    return Metric(
        name=name,
        tags=clean_tags,
        fields=clean_fields,
        timestamp=timestamp or _utcnow(),
        value_type=value_type
    )


def new_metric(
    name: str,
    tags: Optional[Dict[str, str]],
    fields: Optional[Dict[str, Any]],
    timestamp: Optional[datetime] = None
) -> Metric:
    """Create an untyped metric."""
    return _build(name, tags, fields, timestamp, ValueType.UNTYPED)


def new_counter_metric(
    name: str,
    tags: Optional[Dict[str, str]],
    fields: Optional[Dict[str, Any]],
    timestamp: Optional[datetime] = None
) -> Metric:
    """Create a counter metric."""
    return _build(name, tags, fields, timestamp, ValueType.COUNTER)


def new_gauge_metric(
    name: str,
    tags: Optional[Dict[str, str]],
    fields: Optional[Dict[str, Any]],
    timestamp: Optional[datetime] = None
) -> Metric:
    """Create a gauge metric."""
    return _build(name, tags, fields, timestamp, ValueType.GAUGE)


MetricConstructor = Callable[..., Metric]

_CONSTRUCTORS: Dict[ValueType, MetricConstructor] = {
    ValueType.COUNTER: new_counter_metric,
    ValueType.GAUGE: new_gauge_metric,
    ValueType.UNTYPED: new_metric,
}


def make_metric(
    value_type: Optional[ValueType],
    name: str,
    tags: Optional[Dict[str, str]],
    fields: Optional[Dict[str, Any]],
    timestamp: Optional[datetime] = None
) -> Metric:
    """Create a metric with the constructor for ``value_type``.

    Unknown value types fall back to the untyped constructor. Raises
    ``MetricConstructionError`` when the parts do not form a valid metric.
    """
    try:
        value_type = ValueType(value_type)
    except ValueError:
        value_type = ValueType.UNTYPED
    return _CONSTRUCTORS[value_type](name, tags, fields, timestamp)
