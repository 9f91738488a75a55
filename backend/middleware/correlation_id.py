"""
Middleware that gives every request a correlation id and stores request-scoped
metadata in utils.request_context.

Reads X-Request-Id from the incoming request when present and echoes it on the
response.
"""
from typing import Callable
import logging
import time
import uuid

from starlette.types import ASGIApp
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request, Response

from utils.request_context import set_request_context

logger = logging.getLogger(__name__)


def _gen_request_id() -> str:
    return uuid.uuid4().hex


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, header_name: str = "x-request-id"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # starlette headers are case-insensitive
        req_id = request.headers.get(self.header_name) or _gen_request_id()
        client_ip = request.client.host if request.client else None

        set_request_context({"request_id": req_id, "client_ip": client_ip})

        start_time = time.time()
        response = await call_next(request)
        if self.header_name not in response.headers:
            response.headers[self.header_name] = req_id

        logger.info(
            "Request completed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "process_time": round(time.time() - start_time, 4),
            },
        )
        return response
