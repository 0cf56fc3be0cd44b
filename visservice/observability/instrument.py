from __future__ import annotations

from time import perf_counter
from typing import Callable, TypeVar

import structlog

from visservice.observability.metrics import get_metrics


T = TypeVar("T")


def instrument_collaborator_call(*, operation: str, fn: Callable[[], T]) -> T:
    """Time a compiler or match-engine call, update metrics, and emit a structured log event."""

    start = perf_counter()
    try:
        result = fn()
    except Exception:
        elapsed_ms = (perf_counter() - start) * 1000.0
        get_metrics().observe_collaborator_call(elapsed_ms=elapsed_ms, failed=True)
        structlog.get_logger("collaborator").warning(
            "collaborator_call_failed",
            operation=operation,
            elapsed_ms=round(elapsed_ms, 2),
        )
        raise

    elapsed_ms = (perf_counter() - start) * 1000.0
    get_metrics().observe_collaborator_call(elapsed_ms=elapsed_ms)
    structlog.get_logger("collaborator").info(
        "collaborator_call",
        operation=operation,
        elapsed_ms=round(elapsed_ms, 2),
    )
    return result
