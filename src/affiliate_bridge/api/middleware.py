"""API middleware for request logging, webhook rejection metrics and response headers."""

import logging
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from affiliate_bridge.integrations.goaffpro.webhooks import EVENT_HEADER
from affiliate_bridge.observability.metrics import get_metrics_registry
from affiliate_bridge.observability.tracing import add_span_attribute, get_current_trace_id

logger = logging.getLogger(__name__)

WEBHOOK_PREFIX = "/webhooks/"

# Statuses a webhook gets before any event is dispatched
_REJECTED_STATUSES = frozenset({400, 401})


def _webhook_platform(path: str) -> str | None:
    if not path.startswith(WEBHOOK_PREFIX):
        return None
    return path[len(WEBHOOK_PREFIX):].strip("/") or None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with its id and timing.

    Webhook deliveries also log the platform and, for GoAffPro, the event
    header. Deliveries answered 400/401 are counted as rejected, since the
    router never sees them.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        add_span_attribute("http.request_id", request_id)

        platform = _webhook_platform(request.url.path)
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}
        if platform:
            context["webhook_platform"] = platform
            if request.headers.get(EVENT_HEADER):
                context["webhook_event"] = request.headers[EVENT_HEADER]

        start_time = time.perf_counter()
        logger.info("Request started", extra=context)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={**context, "error": str(e), "processing_time_ms": _elapsed_ms(start_time)},
            )
            raise

        processing_time = _elapsed_ms(start_time)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time-Ms"] = str(processing_time)
        trace_id = get_current_trace_id()
        if trace_id:
            response.headers["X-Trace-ID"] = trace_id

        if platform and response.status_code in _REJECTED_STATUSES:
            get_metrics_registry().record_webhook(platform, "-", "rejected")
            logger.warning(
                f"Webhook rejected: {platform} -> {response.status_code}",
                extra={"request_id": request_id},
            )

        logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "processing_time_ms": processing_time,
            },
        )
        return response


def _elapsed_ms(start_time: float) -> int:
    return int((time.perf_counter() - start_time) * 1000)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Response headers for the JSON API. The capture script under /public stays cacheable."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        if not request.url.path.startswith("/public/"):
            response.headers["X-Frame-Options"] = "DENY"
            response.headers.setdefault("Cache-Control", "no-store")
        return response
