"""
Shared utilities for the aggregator routing stage.

This package aggregates common building blocks consumed by the service:

- config: Settings via pydantic-settings
- logging: Structured logging with aggregator context
- metrics: Prometheus counters for routing decisions
- errors: Canonical error types and responses

Do not import from service packages into shared/.
"""
