"""Metrics module - request counters and latency histograms."""

from .collector import MetricsCollector, MetricSample

__all__ = ["MetricsCollector", "MetricSample"]
