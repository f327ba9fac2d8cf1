from __future__ import annotations

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from bomso.core.metrics import http_request_duration_seconds, http_requests_total


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/metrics":
            return await call_next(request)
        started_at = time.perf_counter()
        response = await call_next(request)
        # Route templates only, so org codes and request ids never become label values.
        route_path = getattr(request.scope.get("route"), "path", None) or "unmatched"
        http_requests_total.labels(method=request.method, path=route_path, status=str(response.status_code)).inc()
        http_request_duration_seconds.labels(method=request.method, path=route_path).observe(
            time.perf_counter() - started_at
        )
        return response
