"""
Request ID middleware for request correlation.

- Accepts X-Request-ID from the client or generates one
- Stores it in request.state and the response headers
- Sets the context var so every log line of the request carries it
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from parley.logging_config import get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 1000


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Assign a request ID to each request for correlation across logs."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER)
        request_id = incoming if incoming else str(uuid.uuid4())

        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000

            response.headers[REQUEST_ID_HEADER] = request_id

            if duration_ms > SLOW_REQUEST_MS:
                logger.warning(
                    "Slow request",
                    extra={
                        "path": request.url.path,
                        "method": request.method,
                        "duration_ms": round(duration_ms, 1),
                    },
                )

            return response
        finally:
            request_id_var.reset(token)
