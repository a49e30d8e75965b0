"""
Observability setup for the aggregator routing stage.
Integrates settings, logging and metrics.
"""

from typing import Optional

from prometheus_client import CollectorRegistry

from .config import BaseConfig, get_config
from .logging import configure_logging, get_logger
from .metrics import RouterMetrics, get_router_metrics


class ObservabilityManager:
    """Wires logging and routing counters from one settings object.

    Routers should be given ``manager.metrics`` so their counters land in
    the registry the metrics server exposes. Without a registry this is
    the process-wide instance on the global ``REGISTRY``, which routers
    built without explicit metrics also use.
    """
    
    def __init__(self, config: Optional[BaseConfig] = None,
                 registry: Optional[CollectorRegistry] = None):
        self.config = config or get_config()
        
        configure_logging(self.config.service_name, self.config.log_level)
        self.metrics: RouterMetrics = get_router_metrics(registry)
        self.registry = self.metrics.registry
        
        self.logger = get_logger(f"{self.config.service_name}.observability")
        self.logger.info("Observability initialized",
                         env=self.config.env,
                         log_level=self.config.log_level)
        
        if self.config.enable_metrics_server:
            self.start_metrics_server()
    
    def start_metrics_server(self):
        """Expose routing counters over HTTP."""
        self.metrics.start_metrics_server(self.config.metrics_port)
        self.logger.info("Metrics server started", port=self.config.metrics_port)


def get_observability_manager(config: Optional[BaseConfig] = None, **kwargs) -> ObservabilityManager:
    """Get an observability manager."""
    return ObservabilityManager(config, **kwargs)
