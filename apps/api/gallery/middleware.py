import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from .metrics import REQUEST_LATENCY_MS, GALLERY_REQUEST_ERRORS
from .logging_setup import set_request_id

logger = logging.getLogger(__name__)

_KINDS = ("photos", "videos", "collections")


def _kind_label(path: str) -> str | None:
    parts = [p for p in path.split("/") if p]
    if len(parts) >= 2 and parts[0] == "api" and parts[1] in _KINDS:
        return parts[1]
    return None


class RequestIdAndTimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        set_request_id(req_id)
        start = time.perf_counter()
        status_code = None
        route_label = _kind_label(request.url.path) or request.url.path.rsplit("/", 1)[-1] or request.url.path
        try:
            response = await call_next(request)
            status_code = int(getattr(response, "status_code", 200))
            response.headers["X-Request-ID"] = req_id
            return response
        except Exception:
            # Count unhandled exceptions as 5xx
            GALLERY_REQUEST_ERRORS.labels(route=route_label).inc()
            raise
        finally:
            dur_ms = 1000.0 * (time.perf_counter() - start)
            kind = _kind_label(request.url.path)
            if kind:
                REQUEST_LATENCY_MS.labels(kind=kind).observe(dur_ms)
                logger.info("request", extra={"lat_ms": round(dur_ms, 2), "path": request.url.path, "status": status_code})
            # Count returned 5xx responses
            if status_code and status_code >= 500:
                GALLERY_REQUEST_ERRORS.labels(route=route_label).inc()
            set_request_id(None)
