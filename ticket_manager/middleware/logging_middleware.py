"""
Logging Middleware - Request/Response logging

Analysis requests are tagged with the ticket they were for. The route
stores the validated ticket ID on request.state; the middleware reads it
once the response is ready and echoes it as X-Ticket-Id.
"""
import time
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)

# Polled by uptime monitors
QUIET_PATHS = {"/health"}


def ticket_tag(request: Request) -> Optional[str]:
    """Ticket ID the route recorded for this request, if any"""
    return getattr(request.state, "ticket_id", None)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its duration and, for analyses, its ticket"""

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        label = f"{request.method} {request.url.path}"

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            ticket_id = ticket_tag(request)
            suffix = f" ticket #{ticket_id}" if ticket_id else ""
            logger.error(f"✗ {label}{suffix} ERROR ({duration_ms}ms): {e}", exc_info=True)
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        ticket_id = ticket_tag(request)

        if ticket_id:
            logger.info(f"← {label} {response.status_code} ticket #{ticket_id} ({duration_ms}ms)")
            response.headers["X-Ticket-Id"] = ticket_id
        else:
            logger.info(f"← {label} {response.status_code} ({duration_ms}ms)")

        response.headers["X-Process-Time"] = str(duration_ms)
        return response
