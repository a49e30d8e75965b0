"""
Routing of inbound metrics into a configured aggregator.
"""

from typing import Any, Dict, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.errors import ConfigurationError, MetricConstructionError
from shared.logging import aggregator_context, get_logger
from shared.metrics import RouterMetrics, get_router_metrics

from .aggregator import Aggregator, MetricAccumulator, MetricSink
from .filter import Filter, MetricFilter
from .metric import Metric, ValueType, make_metric, new_metric


class AggregatorConfig(BaseModel):
    """Configuration for one running aggregator.

    Frozen once built; use ``RunningAggregator.reconfigure`` to change it.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)

    drop_original: bool = False
    name_override: str = ""
    measurement_prefix: str = ""
    measurement_suffix: str = ""
    tags: Dict[str, str] = Field(default_factory=dict)
    # Any MetricFilter: is_active() and apply(name, fields, tags), checked below
    filter: Any = Field(default_factory=Filter)

    @field_validator("tags")
    @classmethod
    def _copy_tags(cls, value: Dict[str, str]) -> Dict[str, str]:
        return dict(value)

    @field_validator("filter")
    @classmethod
    def _check_filter(cls, value: Any) -> Any:
        if not (callable(getattr(value, "is_active", None))
                and callable(getattr(value, "apply", None))):
            raise ConfigurationError(
                "Filter must provide is_active() and apply(name, fields, tags)",
                {"filter": type(value).__name__}
            )
        return value


class RunningAggregator:
    """Feeds one aggregator and shapes the metrics it emits.

    ``route`` decides whether an inbound metric reaches the aggregator and
    whether the caller should drop the original. ``build_metric`` applies
    the configured naming and tags to metrics the aggregator emits.

    Configuration is read-only here and no lock is taken, so routes may run
    concurrently; the aggregator is responsible for its own locking.
    """

    def __init__(self, aggregator: Aggregator, config: AggregatorConfig,
                 metrics: Optional[RouterMetrics] = None):
        if not callable(getattr(aggregator, "apply", None)):
            raise ConfigurationError(
                "Aggregator must provide apply(metric)",
                {"aggregator": config.name}
            )
        self.aggregator = aggregator
        self.config = config
        self.metrics = metrics or get_router_metrics()
        self.logger = get_logger(self.name())

        # Snapshots taken once; config.tags is not read while routing
        self._tags = tuple(config.tags.items())
        self._filter: MetricFilter = config.filter

    def name(self) -> str:
        return "aggregators." + self.config.name

    def reconfigure(self, **changes) -> "RunningAggregator":
        """Return a router for the same aggregator with updated settings."""
        config = AggregatorConfig(**{**dict(self.config), **changes})
        return RunningAggregator(self.aggregator, config, self.metrics)

    def build_metric(
        self,
        measurement: str,
        fields: Optional[Dict[str, Any]],
        tags: Optional[Dict[str, str]] = None,
        value_type: Optional[ValueType] = ValueType.UNTYPED,
        timestamp: Optional[datetime] = None
    ) -> Optional[Metric]:
        """Build an outgoing aggregate metric, or None if there is nothing to emit.

        The name is overridden, prefixed and suffixed in that order, and
        configured tags are added where the metric does not already carry
        them. Construction failures are logged and yield None.
        """
        if not fields or not measurement:
            return None

        tags = dict(tags) if tags else {}

        if self.config.name_override:
            measurement = self.config.name_override
        if self.config.measurement_prefix:
            measurement = self.config.measurement_prefix + measurement
        if self.config.measurement_suffix:
            measurement = measurement + self.config.measurement_suffix

        for key, value in self._tags:
            tags.setdefault(key, value)

        try:
            metric = make_metric(value_type, measurement, tags, fields, timestamp)
        except MetricConstructionError as e:
            self.logger.error("Error adding point", measurement=measurement, error=str(e))
            self.metrics.record_build_error(self.config.name)
            return None

        metric.set_aggregate(True)
        return metric

    def route(self, inbound: Metric) -> bool:
        """Apply ``inbound`` to the aggregator if the filter selects it.

        Returns True if the original metric should be dropped.
        """
        with aggregator_context(self.config.name):
            return self._route(inbound)

    def _route(self, inbound: Metric) -> bool:
        if self._filter.is_active():
            name = inbound.name
            fields = dict(inbound.fields)
            tags = dict(inbound.tags)
            if not self._filter.apply(name, fields, tags):
                self.logger.debug("Metric filtered out", measurement=name)
                self.metrics.record_filtered(self.config.name)
                return False

            # Forward only what the filter kept
            try:
                inbound = new_metric(name, tags, fields, inbound.timestamp)
            except MetricConstructionError as e:
                self.logger.warning("Filtered metric could not be rebuilt",
                                    measurement=name, error=str(e))
                self.metrics.record_build_error(self.config.name)
                return False

        self.aggregator.apply(inbound)
        self.metrics.record_pushed(self.config.name)

        if self.config.drop_original:
            self.metrics.record_dropped(self.config.name)
        return self.config.drop_original

    def push(self, sink: MetricSink) -> None:
        """Flush the aggregator into ``sink`` and reset it."""
        with aggregator_context(self.config.name):
            self.aggregator.push(MetricAccumulator(self.build_metric, sink))
            self.aggregator.reset()
