"""
Middleware for collecting HTTP request metrics
"""
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from decisionlog.core.metrics import (http_errors_total,
                                      http_request_duration_seconds,
                                      http_requests_total)


def normalize_endpoint(path: str) -> str:
    """Replace UUID path segments with {id} so metrics aggregate per route"""
    if not path.startswith("/api/"):
        return path
    parts = path.split("/")
    for i, part in enumerate(parts):
        if len(part) == 36 and part.count("-") == 4:
            parts[i] = "{id}"
    return "/".join(parts)


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect HTTP request metrics for Prometheus
    """

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.time()
        status_code = 500
        error_type = None
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as e:
            error_type = type(e).__name__
            raise
        finally:
            duration = time.time() - start_time
            endpoint = normalize_endpoint(request.url.path)
            method = request.method
            status_code_str = str(status_code)

            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status_code=status_code_str
            ).inc()
            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint,
                status_code=status_code_str
            ).observe(duration)

            if status_code >= 400:
                http_errors_total.labels(
                    method=method,
                    endpoint=endpoint,
                    status_code=status_code_str,
                    error_type=error_type or ("client_error" if status_code < 500 else "server_error")
                ).inc()
