"""Tests for metrics module — MetricsCollector and RelayMetrics."""

from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry

from webhooker.metrics.collector import MetricsCollector, RelayMetrics


def _value(metrics: RelayMetrics, name: str, labels: dict[str, str] | None = None) -> float | None:
    return metrics.registry.get_sample_value(name, labels or {})


class TestMetricsCollector:
    """Tests for the low-level MetricsCollector."""

    def test_creates_registry(self) -> None:
        c = MetricsCollector()
        assert c.registry is not None

    def test_custom_registry(self) -> None:
        reg = CollectorRegistry()
        c = MetricsCollector(registry=reg)
        assert c.registry is reg

    def test_counter(self) -> None:
        reg = CollectorRegistry()
        c = MetricsCollector(registry=reg)
        ct = c.counter("test_counter", "A test counter")
        ct.inc()
        ct.inc(2)
        assert reg.get_sample_value("test_counter_total") == 3.0


class TestRelayMetrics:
    """Tests for the high-level RelayMetrics."""

    def test_counters(self) -> None:
        m = RelayMetrics()
        m.event_received()
        m.event_received()
        m.event_forwarded()
        m.decode_failed()
        m.keepalive_sent()
        assert _value(m, "webhooker_events_received_total") == 2.0
        assert _value(m, "webhooker_events_forwarded_total") == 1.0
        assert _value(m, "webhooker_decode_failures_total") == 1.0
        assert _value(m, "webhooker_keepalives_sent_total") == 1.0

    def test_forward_failures_by_code(self) -> None:
        m = RelayMetrics()
        m.forward_failed("network-error")
        m.forward_failed("network-error")
        m.forward_failed("encoding-error")
        assert _value(m, "webhooker_forward_failures_total", {"code": "network-error"}) == 2.0
        assert _value(m, "webhooker_forward_failures_total", {"code": "encoding-error"}) == 1.0

    def test_engine_state_is_one_hot(self) -> None:
        m = RelayMetrics()
        m.set_engine_state("connected")
        assert _value(m, "webhooker_engine_state", {"state": "connected"}) == 1.0
        assert _value(m, "webhooker_engine_state", {"state": "idle"}) == 0.0
        m.set_engine_state("closed")
        assert _value(m, "webhooker_engine_state", {"state": "connected"}) == 0.0
        assert _value(m, "webhooker_engine_state", {"state": "closed"}) == 1.0

    def test_track_forward(self) -> None:
        m = RelayMetrics()
        with m.track_forward():
            pass
        assert _value(m, "webhooker_forward_duration_seconds_count") == 1.0

    def test_track_forward_records_on_error(self) -> None:
        m = RelayMetrics()
        with pytest.raises(RuntimeError), m.track_forward():
            raise RuntimeError("boom")
        assert _value(m, "webhooker_forward_duration_seconds_count") == 1.0

    def test_instances_do_not_share_registry(self) -> None:
        a = RelayMetrics()
        b = RelayMetrics()
        a.event_received()
        assert _value(b, "webhooker_events_received_total") == 0.0
