"""
Shared metrics configuration for the Recipes API.
"""

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, generate_latest
from typing import Dict, Any, Optional
import time
import threading
from contextlib import contextmanager


class MetricsCollector:
    """Centralized metrics collector for services.

    Each collector owns its registry so several service instances (tests,
    workers) can coexist in one process.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        # Service info
        self._metrics["service_info"] = Info(
            "service_info",
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

        # Health check metrics
        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        # Error metrics
        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        # Service-specific metrics
        if self.service_name == "recipes":
            self._setup_recipes_metrics()

    def _setup_recipes_metrics(self):
        """Set up recipes-specific metrics."""
        self._metrics["recipe_cache_hits_total"] = Counter(
            "recipe_cache_hits_total",
            "Total listing cache hits",
            registry=self.registry
        )

        self._metrics["recipe_cache_misses_total"] = Counter(
            "recipe_cache_misses_total",
            "Total listing cache misses",
            registry=self.registry
        )

        self._metrics["recipe_cache_invalidations_total"] = Counter(
            "recipe_cache_invalidations_total",
            "Total listing cache invalidations",
            ["operation"],
            registry=self.registry
        )

        self._metrics["recipe_cache_invalidation_failures_total"] = Counter(
            "recipe_cache_invalidation_failures_total",
            "Total failed listing cache invalidations",
            ["operation"],
            registry=self.registry
        )

        self._metrics["recipe_store_query_duration_seconds"] = Histogram(
            "recipe_store_query_duration_seconds",
            "Recipe store query duration in seconds",
            ["operation"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def export(self) -> bytes:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry)

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

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            if operation_name in self._metrics:
                self._metrics[operation_name].labels(**labels).observe(duration)

    def increment_counter(self, metric_name: str, **labels):
        """Increment a counter metric."""
        metric = self._metrics.get(metric_name)
        if metric is None:
            return
        with self._lock:
            if labels:
                metric.labels(**labels).inc()
            else:
                metric.inc()

    def get_counter_value(self, metric_name: str, **labels) -> float:
        """Read back the current value of a counter (0 if never incremented)."""
        value = self.registry.get_sample_value(f"{metric_name}", labels or None)
        return value or 0.0


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
