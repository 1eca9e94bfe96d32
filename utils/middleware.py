import logging
import time
import uuid
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger("requests")

TRACE_HEADER = "X-Trace-ID"


class RequestResponseLoggingMiddleware(MiddlewareMixin):
    """
    Logs each request and its response under one trace id.
    The trace id is echoed back in the X-Trace-ID response header.
    """

    def process_request(self, request):
        """Log the basic info of the incoming request."""
        request.trace_id = request.headers.get(TRACE_HEADER) or uuid.uuid4().hex
        request.started_at = time.monotonic()

        logger.info(
            f"Trace ID: {request.trace_id} | Request: {request.method} {request.get_full_path()}"
        )
        return None

    def process_response(self, request, response):
        """Log the response status and elapsed time for the same request."""
        trace_id = getattr(request, "trace_id", "N/A")
        started_at = getattr(request, "started_at", None)
        elapsed_ms = (time.monotonic() - started_at) * 1000 if started_at else 0
        user = getattr(request, "user", None)
        user_info = (
            f"{user.username} (ID: {user.id})"
            if user and user.is_authenticated
            else "anonymous"
        )

        logger.info(
            f"Trace ID: {trace_id} | Response: {response.status_code} | "
            f"{elapsed_ms:.1f} ms | User: {user_info}"
        )
        response[TRACE_HEADER] = trace_id
        return response
