import logging
from contextvars import ContextVar
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

request_context: ContextVar[Optional[Request]] = ContextVar("request_context", default=None)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Keep the current request in a context variable for the duration of the call"""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        token = request_context.set(request)
        try:
            return await call_next(request)
        finally:
            request_context.reset(token)


class RequestContextFilter(logging.Filter):
    """Add the current request ("METHOD path", or "-") to log records as `request`"""

    def filter(self, record: logging.LogRecord) -> bool:
        request = request_context.get()
        record.request = f"{request.method} {request.url.path}" if request else "-"
        return True
