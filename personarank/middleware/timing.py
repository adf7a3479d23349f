"""
Request timing middleware

Captures high-resolution start time for each request, assigns a short
request id, and logs total request time.
"""

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from ..utils.debug_logger import debug_logger

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class TimingMiddleware(BaseHTTPMiddleware):
    """Middleware to capture request timing and log total request duration"""

    async def dispatch(self, request: Request, call_next):
        try:
            request.state.start_time = time.perf_counter()
            request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]

            debug_logger.log_route(
                request.state.request_id,
                f"Request started: {request.method} {request.url.path}",
                request
            )

            response = await call_next(request)

            total_time_ms = (time.perf_counter() - request.state.start_time) * 1000
            debug_logger.log_timing(
                request.state.request_id,
                f"{request.method} {request.url.path} -> {response.status_code}",
                total_time_ms
            )
            response.headers[REQUEST_ID_HEADER] = request.state.request_id
            return response

        except Exception as e:
            logger.exception(f"Exception in timing middleware for {request.url.path}: {e}")
            return JSONResponse(
                status_code=500,
                content={"error": "Timing middleware error", "path": str(request.url.path)}
            )
