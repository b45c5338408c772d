"""Metrics collector — Prometheus counters, gauges, histograms.

- ``webhooker_events_received_total`` — inbound frames read from the stream
- ``webhooker_events_forwarded_total`` — events posted to the webhook
- ``webhooker_forward_failures_total`` — failed POSTs, by error code
- ``webhooker_decode_failures_total`` — frames that failed to decode
- ``webhooker_keepalives_sent_total``
- ``webhooker_engine_state`` — 1 for the engine's current state, 0 otherwise
- ``webhooker_forward_duration_seconds``
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator

_PREFIX = "webhooker"

_ENGINE_STATES = ("idle", "connecting", "connected", "closing", "closed")


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`RelayMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def gauge(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Gauge:
        """Register and return a Gauge."""
        return Gauge(name, doc, labels, registry=self._registry)

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class RelayMetrics:
    """High-level relay metrics used by the connection engine."""

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._received = self._collector.counter(
            f"{_PREFIX}_events_received",
            "Frames read from the notification stream",
        )
        self._forwarded = self._collector.counter(
            f"{_PREFIX}_events_forwarded",
            "Events posted to the webhook",
        )
        self._forward_failures = self._collector.counter(
            f"{_PREFIX}_forward_failures",
            "Webhook POSTs that failed",
            ("code",),
        )
        self._decode_failures = self._collector.counter(
            f"{_PREFIX}_decode_failures",
            "Stream frames that could not be decoded",
        )
        self._keepalives = self._collector.counter(
            f"{_PREFIX}_keepalives_sent",
            "Keepalive frames written to the stream",
        )
        self._state = self._collector.gauge(
            f"{_PREFIX}_engine_state",
            "Current connection engine state (1 = active state)",
            ("state",),
        )
        self._forward_duration = self._collector.histogram(
            f"{_PREFIX}_forward_duration_seconds",
            "Duration of webhook POST operations",
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    def event_received(self) -> None:
        self._received.inc()

    def event_forwarded(self) -> None:
        self._forwarded.inc()

    def forward_failed(self, code: str) -> None:
        self._forward_failures.labels(code=code).inc()

    def decode_failed(self) -> None:
        self._decode_failures.inc()

    def keepalive_sent(self) -> None:
        self._keepalives.inc()

    def set_engine_state(self, state: str) -> None:
        """Mark *state* as the current engine state."""
        for name in _ENGINE_STATES:
            self._state.labels(state=name).set(1 if name == state else 0)

    @contextmanager
    def track_forward(self) -> Iterator[None]:
        """Track the duration of a webhook POST."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._forward_duration.observe(time.monotonic() - start)
