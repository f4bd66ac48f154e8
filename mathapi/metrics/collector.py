"""Request metrics on a private Prometheus registry."""

from typing import NamedTuple

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

DEFAULT_BUCKETS = Histogram.DEFAULT_BUCKETS


class MetricSample(NamedTuple):
    """One exported sample.

    Attributes:
        name: Sample name (e.g. ``http_requests_total``).
        labels: Label values keyed by label name.
        value: Current value.
    """

    name: str
    labels: dict[str, str]
    value: float


class MetricsCollector:
    """Request counters and latency histograms.

    prometheus_client guards every metric with its own lock, so ``observe``
    is safe to call from many requests at once. Each collector owns its
    registry; nothing is registered globally.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        buckets: tuple[float, ...] = DEFAULT_BUCKETS,
    ) -> None:
        self.registry = registry or CollectorRegistry()
        self.requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            ["method", "path", "status"],
            registry=self.registry,
        )
        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests",
            ["method", "path"],
            buckets=buckets,
            registry=self.registry,
        )
        self.audit_failures_total = Counter(
            "audit_write_failures_total",
            "Operation records that could not be written",
            ["operation", "reason"],
            registry=self.registry,
        )

    def observe(self, method: str, path: str, status: int, duration: float) -> None:
        """Record one completed request.

        Args:
            method: HTTP method.
            path: Matched route template, not the raw URL.
            status: Response status code.
            duration: Elapsed seconds.
        """
        self.requests_total.labels(method=method, path=path, status=str(status)).inc()
        self.request_duration.labels(method=method, path=path).observe(duration)

    def record_audit_failure(self, operation: str, reason: str) -> None:
        self.audit_failures_total.labels(operation=operation, reason=reason).inc()

    def sample_value(self, name: str, labels: dict[str, str] | None = None) -> float | None:
        """Current value of a single sample, or None if it was never set."""
        return self.registry.get_sample_value(name, labels or {})

    def snapshot(self) -> list[MetricSample]:
        """Read-only copy of every current sample."""
        return [
            MetricSample(sample.name, dict(sample.labels), sample.value)
            for metric in self.registry.collect()
            for sample in metric.samples
        ]

    def render(self) -> bytes:
        """Prometheus text exposition of the registry."""
        return generate_latest(self.registry)
