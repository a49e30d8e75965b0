"""
Metric, filter and aggregator models.
"""

from .aggregator import Accumulator, Aggregator, MetricAccumulator
from .filter import Filter, MetricFilter, TagFilter
from .metric import (
    Metric,
    ValueType,
    make_metric,
    new_counter_metric,
    new_gauge_metric,
    new_metric,
)
from .running_aggregator import AggregatorConfig, RunningAggregator

__all__ = [
    "Accumulator",
    "Aggregator",
    "AggregatorConfig",
    "Filter",
    "Metric",
    "MetricAccumulator",
    "MetricFilter",
    "RunningAggregator",
    "TagFilter",
    "ValueType",
    "make_metric",
    "new_counter_metric",
    "new_gauge_metric",
    "new_metric",
]
