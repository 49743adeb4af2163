import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.request_context import get_request_context

logger = logging.getLogger("access")

class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log line per request, tagged with the acting user"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        context = get_request_context(request)

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{context['endpoint']} - Status: {response.status_code} - "
            f"User: {context['user_id'] or '-'} - Client: {context['ip_address'] or 'unknown'} - "
            f"Request: {context['request_id'] or '-'} - Time: {process_time:.4f}s"
        )

        response.headers["X-Process-Time"] = str(process_time)
        return response
