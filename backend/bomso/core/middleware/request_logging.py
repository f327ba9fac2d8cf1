from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("bomso.api")

REQUEST_ID_HEADER = "X-Request-ID"

# Route parameter name -> log record attribute understood by JsonFormatter.
_PATH_PARAM_FIELDS = {"org_code": "org_code", "request_id": "subscription_request_id"}


def _log_level(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


def _domain_fields(request: Request) -> dict[str, str]:
    # path_params are only filled in once the router has matched the request.
    path_params = request.scope.get("path_params") or {}
    return {field: path_params[param] for param, field in _PATH_PARAM_FIELDS.items() if param in path_params}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs one line per request.

    Org codes and subscription request ids from the matched route are attached
    to the record so ledger and registry calls can be traced by key.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        started_at = time.perf_counter()
        response = await call_next(request)
        response.headers.setdefault(REQUEST_ID_HEADER, request.state.request_id)
        logger.log(
            _log_level(response.status_code),
            "%s %s -> %s",
            request.method,
            request.url.path,
            response.status_code,
            extra={
                "request_id": request.state.request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started_at) * 1000, 2),
                **_domain_fields(request),
            },
        )
        return response
