"""
Prometheus self-metrics for the Copilot Metrics Bridge.

These describe the bridge itself (requests served, scopes processed, points
and chunks delivered), not the Copilot usage data it forwards.
"""

from typing import Dict, Any, Optional
import threading

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, REGISTRY


class MetricsCollector:
    """Centralized metrics collector for the service."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else REGISTRY
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common and pipeline metrics for the service."""

        self._metrics["service_info"] = Info(
            "service",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        self._setup_pipeline_metrics()

    def _setup_pipeline_metrics(self):
        """Set up flatten/dispatch pipeline metrics."""
        self._metrics["scope_runs_total"] = Counter(
            "copilot_scope_runs_total",
            "Total scope runs",
            ["scope_kind", "status"],
            registry=self.registry
        )

        self._metrics["points_flattened_total"] = Counter(
            "copilot_points_flattened_total",
            "Total time-series points produced by flattening",
            ["scope_kind"],
            registry=self.registry
        )

        self._metrics["chunks_submitted_total"] = Counter(
            "copilot_chunks_submitted_total",
            "Total chunks handed to the transport",
            ["status"],
            registry=self.registry
        )

        self._metrics["run_duration_seconds"] = Histogram(
            "copilot_run_duration_seconds",
            "Duration of a full multi-scope run in seconds",
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    def record_scope_run(self, scope_kind: str, status: str):
        """Record the outcome of one scope run."""
        self._metrics["scope_runs_total"].labels(scope_kind=scope_kind, status=status).inc()

    def record_points_flattened(self, scope_kind: str, count: int):
        self._metrics["points_flattened_total"].labels(scope_kind=scope_kind).inc(count)

    def record_chunk(self, status: str):
        self._metrics["chunks_submitted_total"].labels(status=status).inc()


_collectors: Dict[str, MetricsCollector] = {}
_collectors_lock = threading.Lock()


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service.

    Collectors bound to the default registry are cached per service name,
    since prometheus_client refuses to register the same metric twice.
    """
    if registry is not None:
        return MetricsCollector(service_name, registry)

    with _collectors_lock:
        collector = _collectors.get(service_name)
        if collector is None:
            collector = MetricsCollector(service_name)
            _collectors[service_name] = collector
        return collector
