from bomso.core.middleware.metrics import MetricsMiddleware
from bomso.core.middleware.request_logging import RequestLoggingMiddleware
from bomso.core.middleware.request_size_limit import RequestSizeLimitMiddleware

__all__ = [
    "MetricsMiddleware",
    "RequestLoggingMiddleware",
    "RequestSizeLimitMiddleware",
]
