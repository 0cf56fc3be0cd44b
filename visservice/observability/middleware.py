from __future__ import annotations

import re
import uuid
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import Headers, MutableHeaders

from visservice.observability.metrics import get_metrics

REQUEST_ID_HEADER = "X-Request-ID"

_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# Liveness and metrics polling: not counted, access-logged at debug only.
_UNMETERED_PATHS = frozenset({"/health", "/api/metrics"})


def _request_id_from(scope: dict[str, Any]) -> str:
    """Reuse a caller-supplied request id when it is safe to echo, else mint one."""
    inbound = Headers(scope=scope).get(REQUEST_ID_HEADER)
    if inbound and _VALID_REQUEST_ID.match(inbound):
        return inbound
    return uuid.uuid4().hex


class RequestContextMiddleware:
    """
    Binds request context for structlog, echoes the request id on the response,
    writes one access log line per request, and feeds the HTTP metrics.
    """

    def __init__(self, app: Callable[..., Any], unmetered_paths: frozenset[str] = _UNMETERED_PATHS) -> None:
        self.app = app
        self.unmetered_paths = unmetered_paths

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = _request_id_from(scope)
        path = scope.get("path")
        structlog.contextvars.bind_contextvars(request_id=request_id, path=path, method=scope.get("method"))

        start = perf_counter()
        status_code = 500

        async def send_with_request_id(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            elapsed_ms = (perf_counter() - start) * 1000.0
            access = structlog.get_logger("access")
            if path in self.unmetered_paths:
                access.debug("http_request", status_code=status_code, elapsed_ms=round(elapsed_ms, 2))
            else:
                get_metrics().observe_http_request(elapsed_ms=elapsed_ms, status_code=status_code)
                log = access.warning if status_code >= 500 else access.info
                log(
                    "http_request",
                    status_code=status_code,
                    elapsed_ms=round(elapsed_ms, 2),
                    query=scope.get("query_string", b"").decode("latin-1") or None,
                )
            structlog.contextvars.clear_contextvars()
