from __future__ import annotations

import contextvars
import logging
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

REQUEST_ID_HEADER = "x-request-id"

_request_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("rbac_request_id", default=None)


class RequestIdFilter(logging.Filter):
    """Adds `request_id` to every record; "-" outside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get() or "-"
        return True


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Reuses the caller's x-request-id (gateway, storefront API) or mints one,
    so denials and decision failures can be traced back across services.
    """

    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = _request_id.set(req_id)
        request.state.request_id = req_id
        try:
            response = await call_next(request)
        finally:
            _request_id.reset(token)
        response.headers[REQUEST_ID_HEADER] = req_id
        return response
