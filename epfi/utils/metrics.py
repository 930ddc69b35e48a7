"""
EPFI Metrics Collection
In-process metrics collection for monitoring and performance tracking.
"""
import time
from collections import defaultdict, Counter
from typing import Any, Dict, List, Optional
from threading import Lock


class MetricsCollector:
    """Simple in-process metrics collector."""

    def __init__(self):
        """Initialize metrics collector."""
        self._lock = Lock()
        self._counters: Dict[str, int] = Counter()
        self._timings: Dict[str, List[float]] = defaultdict(list)
        self._attempts: List[int] = []
        self._start_time = time.time()

    def increment_request_count(self, endpoint: str = "palette"):
        """Increment request counter for an endpoint."""
        with self._lock:
            self._counters[f"{endpoint}_requests_total"] += 1

    def increment_mode_count(self, mode: str):
        """Increment refinement mode usage counter."""
        with self._lock:
            self._counters[f"palette_mode_used_total_{mode}"] += 1

    def increment_failure_count(self, error_kind: str):
        """Increment failure counter by error kind."""
        with self._lock:
            self._counters[f"palette_failed_total_{error_kind}"] += 1

    def record_timing(self, operation: str, duration_ms: float):
        """Record timing for an operation."""
        with self._lock:
            self._timings[f"{operation}_duration_ms"].append(duration_ms)

    def record_attempts(self, attempts: int):
        """Record how many refinement passes a palette needed."""
        with self._lock:
            self._attempts.append(attempts)
            if attempts > 1:
                self._counters["palette_relaxed_total"] += 1

    def get_counters(self) -> Dict[str, int]:
        """Get current counter values."""
        with self._lock:
            return dict(self._counters)

    def get_timing_stats(self) -> Dict[str, Dict[str, float]]:
        """Get timing statistics."""
        with self._lock:
            stats = {}
            for operation, timings in self._timings.items():
                if timings:
                    stats[operation] = self._summarize(timings)
            return stats

    def get_attempt_stats(self) -> Dict[str, float]:
        """Get refinement attempt statistics."""
        with self._lock:
            if not self._attempts:
                return {}
            return self._summarize(self._attempts)

    def get_uptime_seconds(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def get_summary(self) -> Dict[str, Any]:
        """Get complete metrics summary."""
        return {
            "uptime_seconds": self.get_uptime_seconds(),
            "counters": self.get_counters(),
            "timing_stats": self.get_timing_stats(),
            "attempt_stats": self.get_attempt_stats()
        }

    def reset(self):
        """Reset all metrics (for testing)."""
        with self._lock:
            self._counters.clear()
            self._timings.clear()
            self._attempts.clear()
            self._start_time = time.time()

    @classmethod
    def _summarize(cls, data: List[float]) -> Dict[str, float]:
        return {
            "count": len(data),
            "mean": sum(data) / len(data),
            "min": min(data),
            "max": max(data),
            "p50": cls._percentile(data, 50),
            "p95": cls._percentile(data, 95)
        }

    @staticmethod
    def _percentile(data: List[float], percentile: int) -> float:
        """Calculate percentile of data."""
        if not data:
            return 0.0

        sorted_data = sorted(data)
        k = (len(sorted_data) - 1) * percentile / 100
        f = int(k)
        c = k - f

        if f + 1 < len(sorted_data):
            return sorted_data[f] + c * (sorted_data[f + 1] - sorted_data[f])
        else:
            return sorted_data[f]


# Global metrics instance
_metrics: Optional[MetricsCollector] = None


def get_metrics() -> MetricsCollector:
    """Get or create global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    global _metrics
    if _metrics is not None:
        _metrics.reset()
