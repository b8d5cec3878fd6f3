"""
Shared utilities for the Copilot Metrics Bridge.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with run correlation
- metrics: Prometheus self-metrics helpers
- errors: Canonical error types and responses
- retry: Retry decorator for outbound fetches

Any cross-service logic should live here to avoid import cycles across
service packages. Do not import from service_* packages into shared/.
"""
