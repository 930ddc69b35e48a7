"""
Tests for request ids, metrics collection and configuration helpers.
"""
import re

import pytest

from epfi.config import Config
from epfi.utils.ids import generate_request_id
from epfi.utils.metrics import MetricsCollector, get_metrics, reset_metrics


class TestRequestIds:

    def test_format(self):
        assert re.fullmatch(r"pal-\d{14}-[0-9a-f]{8}", generate_request_id())

    def test_prefix(self):
        assert generate_request_id("swt").startswith("swt-")

    def test_unique(self):
        assert len({generate_request_id() for _ in range(50)}) == 50


class TestMetricsCollector:

    def test_counters(self):
        metrics = MetricsCollector()
        metrics.increment_request_count("palette")
        metrics.increment_request_count("palette")
        metrics.increment_mode_count("quantized")
        metrics.increment_failure_count("refinement_exhausted")

        counters = metrics.get_counters()
        assert counters["palette_requests_total"] == 2
        assert counters["palette_mode_used_total_quantized"] == 1
        assert counters["palette_failed_total_refinement_exhausted"] == 1

    def test_attempts_track_relaxation(self):
        metrics = MetricsCollector()
        for attempts in (1, 1, 4, 9):
            metrics.record_attempts(attempts)

        stats = metrics.get_attempt_stats()
        assert stats["count"] == 4
        assert stats["max"] == 9
        assert stats["mean"] == pytest.approx(3.75)
        assert metrics.get_counters()["palette_relaxed_total"] == 2

    def test_timing_percentiles(self):
        metrics = MetricsCollector()
        for value in (10.0, 20.0, 30.0, 40.0, 50.0):
            metrics.record_timing("palette_refine", value)

        stats = metrics.get_timing_stats()["palette_refine_duration_ms"]
        assert stats["p50"] == 30.0
        assert stats["p95"] == pytest.approx(48.0)
        assert stats["min"] == 10.0

    def test_summary_shape(self):
        summary = MetricsCollector().get_summary()
        assert set(summary) == {"uptime_seconds", "counters", "timing_stats", "attempt_stats"}
        assert summary["attempt_stats"] == {}

    def test_global_reset(self):
        get_metrics().increment_request_count("palette")
        reset_metrics()
        assert get_metrics().get_counters() == {}


class TestConfig:

    def test_defaults_disable_optional_limits(self, monkeypatch):
        monkeypatch.setattr(Config, "STRIPE_WORKERS", 0)
        monkeypatch.setattr(Config, "REFINE_TIMEOUT_S", 0.0)
        assert Config.stripe_workers() is None
        assert Config.refine_timeout() is None

    def test_overrides(self, monkeypatch):
        monkeypatch.setattr(Config, "STRIPE_WORKERS", 3)
        monkeypatch.setattr(Config, "REFINE_TIMEOUT_S", 1.5)
        assert Config.stripe_workers() == 3
        assert Config.refine_timeout() == 1.5

    @pytest.mark.parametrize("width,height,valid", [(50, 100, True), (0, 100, False), (5, -1, False)])
    def test_stripe_size(self, width, height, valid):
        assert Config.validate_stripe_size(width, height) is valid
