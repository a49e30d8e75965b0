"""
Aggregator capability and the accumulator aggregators emit through.
"""

from typing import Any, Callable, Dict, Optional, Protocol
from datetime import datetime

from .metric import Metric, ValueType

MetricMaker = Callable[..., Optional[Metric]]
MetricSink = Callable[[Metric], None]


class Accumulator(Protocol):
    """Emission surface handed to an aggregator during push."""

    def add_fields(self, measurement: str, fields: Dict[str, Any],
                   tags: Optional[Dict[str, str]] = None,
                   timestamp: Optional[datetime] = None) -> None:
        ...

    def add_gauge(self, measurement: str, fields: Dict[str, Any],
                  tags: Optional[Dict[str, str]] = None,
                  timestamp: Optional[datetime] = None) -> None:
        ...

    def add_counter(self, measurement: str, fields: Dict[str, Any],
                    tags: Optional[Dict[str, str]] = None,
                    timestamp: Optional[datetime] = None) -> None:
        ...


class Aggregator(Protocol):
    """Stateful accumulation logic fed by a router.

    ``apply`` is expected to do its own locking and to return promptly.
    """

    def apply(self, metric: Metric) -> None:
        ...

    def push(self, accumulator: Accumulator) -> None:
        ...

    def reset(self) -> None:
        ...


class MetricAccumulator:
    """Builds outgoing metrics through a maker and hands them to a sink.

    The maker is normally ``RunningAggregator.build_metric`` so that
    aggregator output gets the same naming and tagging as the router
    applies. Metrics the maker declines (``None``) are skipped.
    """

    def __init__(self, maker: MetricMaker, sink: MetricSink):
        self.maker = maker
        self.sink = sink

    def add_fields(self, measurement, fields, tags=None, timestamp=None):
        self._add(measurement, fields, tags, ValueType.UNTYPED, timestamp)

    def add_gauge(self, measurement, fields, tags=None, timestamp=None):
        self._add(measurement, fields, tags, ValueType.GAUGE, timestamp)

    def add_counter(self, measurement, fields, tags=None, timestamp=None):
        self._add(measurement, fields, tags, ValueType.COUNTER, timestamp)

    def _add(self, measurement, fields, tags, value_type, timestamp):
        metric = self.maker(measurement, fields, tags, value_type, timestamp)
        if metric is None:
            return
        self.sink(metric)
