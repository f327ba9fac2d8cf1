from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from bomso.api.response import exception_envelope


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects bodies whose declared length exceeds the limit (dataset imports are the large ones)."""

    def __init__(self, app, *, max_request_body_bytes: int) -> None:
        super().__init__(app)
        self._max_request_body_bytes = max_request_body_bytes

    async def dispatch(self, request: Request, call_next):
        declared = request.headers.get("content-length")
        if declared is None or not declared.isdigit():
            return await call_next(request)
        if int(declared) <= self._max_request_body_bytes:
            return await call_next(request)
        payload = exception_envelope(
            request=request,
            status_code=413,
            message="Payload too large",
            code="payload_too_large",
            details={"limit_bytes": self._max_request_body_bytes},
        )
        return JSONResponse(status_code=413, content=payload)
