"""
Request tracing.

Each request gets a correlation id (the caller's X-Correlation-ID or a new
UUID4). The id is visible to every log line emitted while the request runs and
is echoed back in the response headers. Status classes and durations feed
/metrics.
"""
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from careerlift.utils.logger import correlation_id_var, logger
from careerlift.utils.metrics import inc, observe

# Probes and scrapes are counted but not logged
QUIET_PATHS = frozenset({"/", "/health", "/metrics"})


class CorrelationMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = request.headers.get("x-correlation-id") or str(uuid.uuid4())
        token = correlation_id_var.set(cid)
        path = request.url.path
        start = time.monotonic()

        try:
            response = await call_next(request)
        except Exception as exc:
            inc("http.5xx")
            logger.error(
                f"{request.method} {path} raised {type(exc).__name__}",
                extra={"method": request.method, "path": path, "error": str(exc), "error_type": type(exc).__name__},
            )
            raise
        finally:
            elapsed_ms = (time.monotonic() - start) * 1000
            observe("http.duration_ms", elapsed_ms)
            correlation_id_var.reset(token)

        inc(f"http.{response.status_code // 100}xx")
        if path not in QUIET_PATHS:
            log_fn = logger.warning if response.status_code >= 400 else logger.info
            log_fn(
                f"{request.method} {path} -> {response.status_code} ({round(elapsed_ms)} ms)",
                extra={
                    "correlation_id": cid,
                    "method": request.method,
                    "path": path,
                    "status": response.status_code,
                    "duration_ms": round(elapsed_ms),
                    "user_id": request.headers.get("x-user-id", ""),
                },
            )

        response.headers["X-Correlation-ID"] = cid
        return response
