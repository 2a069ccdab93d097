from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

log = logging.getLogger("rbac")


class RBACError(Exception):
    """Base class for errors raised by the RBAC services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RBACError):
    """Malformed identifier or payload on a mutating operation."""

    status_code = 400


class NotFoundError(RBACError):
    status_code = 404


class DuplicateError(RBACError):
    status_code = 409


class DecisionFailure(RBACError):
    """
    A permission check could not complete. Never treated as a grant.
    """

    status_code = 500


async def _rbac_error_handler(request: Request, exc: RBACError) -> JSONResponse:
    content = {"detail": exc.message}
    if exc.status_code >= 500:
        log.error("rbac failure path=%s err=%s", request.url.path, exc.message)
        # same id as the log lines for this request
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            content["request_id"] = request_id
    return JSONResponse(status_code=exc.status_code, content=content)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RBACError, _rbac_error_handler)
