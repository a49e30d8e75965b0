"""
Self-instrumentation for the aggregator routing stage.
"""

from typing import Dict, Any, Optional
import threading

from prometheus_client import REGISTRY, Counter, CollectorRegistry, start_http_server


class RouterMetrics:
    """Prometheus counters describing what routers did with metrics.

    One instance may be shared by every router of a pipeline; each series
    carries the router's name in the ``aggregator`` label. Without an
    explicit registry the counters go to the global ``REGISTRY``, which
    accepts them once per process; use ``get_router_metrics()`` for that
    shared instance.
    """
    
    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else REGISTRY
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()
    
    def _setup_metrics(self):
        """Set up routing counters."""
        self._metrics["metrics_pushed_total"] = Counter(
            "aggregator_metrics_pushed_total",
            "Metrics forwarded to the aggregator",
            ["aggregator"],
            registry=self.registry
        )
        
        self._metrics["metrics_filtered_total"] = Counter(
            "aggregator_metrics_filtered_total",
            "Metrics rejected by the aggregator filter",
            ["aggregator"],
            registry=self.registry
        )
        
        self._metrics["metrics_dropped_total"] = Counter(
            "aggregator_metrics_dropped_total",
            "Original metrics suppressed after aggregation",
            ["aggregator"],
            registry=self.registry
        )
        
        self._metrics["build_errors_total"] = Counter(
            "aggregator_build_errors_total",
            "Metrics that failed construction",
            ["aggregator"],
            registry=self.registry
        )
    
    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)
    
    def start_metrics_server(self, port: int = 9273):
        """Start the Prometheus metrics server for this registry."""
        start_http_server(port, registry=self.registry)
    
    def record_pushed(self, aggregator: str):
        self._metrics["metrics_pushed_total"].labels(aggregator=aggregator).inc()
    
    def record_filtered(self, aggregator: str):
        self._metrics["metrics_filtered_total"].labels(aggregator=aggregator).inc()
    
    def record_dropped(self, aggregator: str):
        self._metrics["metrics_dropped_total"].labels(aggregator=aggregator).inc()
    
    def record_build_error(self, aggregator: str):
        self._metrics["build_errors_total"].labels(aggregator=aggregator).inc()


_default_metrics: Optional[RouterMetrics] = None
_default_lock = threading.Lock()


def get_router_metrics(registry: Optional[CollectorRegistry] = None) -> RouterMetrics:
    """Get router metrics bound to a registry.

    Without a registry, returns the process-wide instance on ``REGISTRY``.
    """
    global _default_metrics
    if registry is not None and registry is not REGISTRY:
        return RouterMetrics(registry)
    with _default_lock:
        if _default_metrics is None:
            _default_metrics = RouterMetrics(REGISTRY)
        return _default_metrics
