from __future__ import annotations

import logging

import jwt
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..settings import settings

log = logging.getLogger("rbac.auth")


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Resolves the caller identity from an already-issued bearer token.

    Sets request.state.user (claims) and request.state.user_id. A missing or
    invalid token leaves both as None; enforcement answers 401 for those.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.user = None
        request.state.user_id = None

        auth = request.headers.get("authorization") or ""
        if auth[:7].lower() == "bearer ":
            token = auth[7:].strip()
            try:
                claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
            except jwt.PyJWTError as e:
                log.info("bearer token rejected path=%s err=%s", request.url.path, e)
            else:
                request.state.user = claims
                request.state.user_id = claims.get(settings.JWT_USER_ID_CLAIM) or claims.get("sub")

        return await call_next(request)
