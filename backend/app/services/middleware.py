"""Per-request tracing for the wall estimator API."""
import time
import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("archlens-api.middleware")

SKIP_LOG_PATHS = {"/health"}
REQUEST_ID_HEADER = "X-Request-ID"


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    Correlates estimate and AI requests across client and server logs.

    A caller-supplied X-Request-ID is kept so a mobile client can match a slow
    composition or perspective call to its log line; otherwise one is minted.
    The id and the elapsed milliseconds are echoed as X-Request-ID and
    X-Process-Time.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        response: Response = await call_next(request)

        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = str(elapsed_ms)

        path = request.url.path
        if path in SKIP_LOG_PATHS:
            return response

        # Upstream LLM failures on the AI routes log at WARNING
        level = logging.INFO
        if path.endswith(("/composition", "/perspectives")) and response.status_code >= 500:
            level = logging.WARNING
        logger.log(
            level,
            f"{request.method} {path} -> {response.status_code} in {elapsed_ms} ms",
            extra={
                "http_method": request.method,
                "http_path": path,
                "http_status": response.status_code,
                "request_id": request_id,
                "duration_ms": elapsed_ms,
            },
        )
        return response
