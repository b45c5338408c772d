"""Metrics — Prometheus metrics collection and exposure."""

from __future__ import annotations

from webhooker.metrics.collector import MetricsCollector, RelayMetrics

__all__ = ["MetricsCollector", "RelayMetrics"]
