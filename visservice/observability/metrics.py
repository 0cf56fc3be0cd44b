from __future__ import annotations

from dataclasses import asdict, dataclass
from threading import Lock
from typing import Any


@dataclass
class _LatencyAgg:
    count: int = 0
    sum_ms: float = 0.0
    max_ms: float = 0.0

    def observe(self, elapsed_ms: float) -> None:
        self.count += 1
        self.sum_ms += float(elapsed_ms)
        if elapsed_ms > self.max_ms:
            self.max_ms = float(elapsed_ms)


class InMemoryMetrics:
    """Thread-safe, process-local metrics (resets on restart)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self.http_requests_total: int = 0
        self.http_client_errors_total: int = 0
        self.http_server_errors_total: int = 0
        self.collaborator_calls_total: int = 0
        self.collaborator_failures_total: int = 0
        self.cache_hits_total: int = 0
        self.cache_misses_total: int = 0
        self.cache_errors_total: int = 0
        self.http_request_ms = _LatencyAgg()
        self.collaborator_call_ms = _LatencyAgg()

    def observe_http_request(self, elapsed_ms: float, status_code: int = 200) -> None:
        with self._lock:
            self.http_requests_total += 1
            if 400 <= status_code < 500:
                self.http_client_errors_total += 1
            elif status_code >= 500:
                self.http_server_errors_total += 1
            self.http_request_ms.observe(elapsed_ms)

    def observe_collaborator_call(self, elapsed_ms: float, failed: bool = False) -> None:
        with self._lock:
            self.collaborator_calls_total += 1
            if failed:
                self.collaborator_failures_total += 1
            self.collaborator_call_ms.observe(elapsed_ms)

    def observe_cache_lookup(self, hit: bool) -> None:
        with self._lock:
            if hit:
                self.cache_hits_total += 1
            else:
                self.cache_misses_total += 1

    def observe_cache_error(self) -> None:
        with self._lock:
            self.cache_errors_total += 1

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": {
                    "http_requests_total": self.http_requests_total,
                    "http_client_errors_total": self.http_client_errors_total,
                    "http_server_errors_total": self.http_server_errors_total,
                    "collaborator_calls_total": self.collaborator_calls_total,
                    "collaborator_failures_total": self.collaborator_failures_total,
                    "cache_hits_total": self.cache_hits_total,
                    "cache_misses_total": self.cache_misses_total,
                    "cache_errors_total": self.cache_errors_total,
                },
                "latency_ms": {
                    "http_request_ms": asdict(self.http_request_ms),
                    "collaborator_call_ms": asdict(self.collaborator_call_ms),
                },
            }

    def reset(self) -> None:
        with self._lock:
            self.http_requests_total = 0
            self.http_client_errors_total = 0
            self.http_server_errors_total = 0
            self.collaborator_calls_total = 0
            self.collaborator_failures_total = 0
            self.cache_hits_total = 0
            self.cache_misses_total = 0
            self.cache_errors_total = 0
            self.http_request_ms = _LatencyAgg()
            self.collaborator_call_ms = _LatencyAgg()


_METRICS: InMemoryMetrics | None = None


def get_metrics() -> InMemoryMetrics:
    global _METRICS
    if _METRICS is None:
        _METRICS = InMemoryMetrics()
    return _METRICS


def reset_metrics() -> None:
    """Reset metrics counters/aggregates (used by tests)."""

    get_metrics().reset()
