"""
Route-level enforcement, bound at registration time:

    @router.post("/products", dependencies=[Depends(require_permission("products", "create"))])

Per request: unauthenticated -> 401, denied -> 403 with the missing
resource:action, fault or timeout while checking -> 500. Never a grant.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Tuple, Union

from fastapi import HTTPException, Request

from ..errors import DecisionFailure
from ..models.permission import Action, Resource, permission_string
from ..schemas.check import PermissionDecision
from ..services.decision import DecisionEngine

log = logging.getLogger("rbac.enforcement")

PermissionPair = Tuple[Union[Resource, str], Union[Action, str]]

CHECK_FAILED = "Internal server error while checking permissions"
ADMIN_CHECK_FAILED = "Internal server error while checking admin status"


def current_user_id(request: Request) -> Optional[str]:
    return getattr(request.state, "user_id", None)


def _engine(request: Request) -> DecisionEngine:
    return request.app.state.decision_engine


def _authenticated(request: Request) -> str:
    user_id = current_user_id(request)
    if not user_id:
        raise HTTPException(401, detail="Unauthorized: User not authenticated")
    return str(user_id)


def _normalize(pairs: Iterable[PermissionPair]) -> List[Tuple[Resource, Action]]:
    # unknown resource/action names fail at route registration, not per request
    return [(Resource(r), Action(a)) for r, a in pairs]


async def _check(request: Request, user_id: str, resource: Resource, action: Action) -> PermissionDecision:
    try:
        return await _engine(request).check_permission(user_id, resource, action)
    except Exception:
        log.exception("permission check raised user_id=%s perm=%s", user_id, permission_string(resource, action))
        return PermissionDecision(granted=False, reason="Error checking permissions", failed=True)


async def require_authenticated(request: Request) -> str:
    return _authenticated(request)


def require_permission(resource: Union[Resource, str], action: Union[Action, str]):
    res, act = _normalize([(resource, action)])[0]
    required = permission_string(res, act)

    async def dependency(request: Request) -> str:
        user_id = _authenticated(request)
        request.state.required_permission = required

        decision = await _check(request, user_id, res, act)
        if decision.failed:
            raise DecisionFailure(CHECK_FAILED)
        if not decision.granted:
            log.info("denied user_id=%s perm=%s reason=%s", user_id, required, decision.reason)
            raise HTTPException(
                403,
                detail={
                    "message": f"Forbidden: {decision.reason or 'Insufficient permissions'}",
                    "required_permission": required,
                },
            )
        return user_id

    return dependency


def require_any_permission(permissions: Iterable[PermissionPair]):
    pairs = _normalize(permissions)
    required = [permission_string(r, a) for r, a in pairs]

    async def dependency(request: Request) -> str:
        user_id = _authenticated(request)
        failed = False
        for res, act in pairs:
            decision = await _check(request, user_id, res, act)
            if decision.granted:
                return user_id
            failed = failed or decision.failed

        if failed:
            raise DecisionFailure(CHECK_FAILED)
        log.info("denied user_id=%s any_of=%s", user_id, required)
        raise HTTPException(
            403,
            detail={
                "message": f"Forbidden: Insufficient permissions. Required: {', '.join(required)}",
                "required_permissions": required,
            },
        )

    return dependency


def require_all_permissions(permissions: Iterable[PermissionPair]):
    pairs = _normalize(permissions)

    async def dependency(request: Request) -> str:
        user_id = _authenticated(request)
        missing: List[str] = []
        for res, act in pairs:
            decision = await _check(request, user_id, res, act)
            if decision.failed:
                raise DecisionFailure(CHECK_FAILED)
            if not decision.granted:
                missing.append(permission_string(res, act))

        if missing:
            log.info("denied user_id=%s missing=%s", user_id, missing)
            raise HTTPException(
                403,
                detail={
                    "message": f"Forbidden: Missing permissions: {', '.join(missing)}",
                    "missing_permissions": missing,
                },
            )
        return user_id

    return dependency


async def _admin_status(engine: DecisionEngine, user_id: str) -> bool:
    return await engine.is_admin(user_id) or await engine.has_role(user_id, "admin")


async def require_admin(request: Request) -> str:
    user_id = _authenticated(request)
    engine = _engine(request)
    try:
        allowed = await asyncio.wait_for(_admin_status(engine, user_id), timeout=engine.timeout_seconds)
    except asyncio.TimeoutError:
        log.warning("admin check timed out user_id=%s timeout=%ss", user_id, engine.timeout_seconds)
        raise DecisionFailure(ADMIN_CHECK_FAILED)
    except Exception:
        log.exception("admin check failed user_id=%s", user_id)
        raise DecisionFailure(ADMIN_CHECK_FAILED)

    if not allowed:
        log.info("denied user_id=%s admin required", user_id)
        raise HTTPException(403, detail="Forbidden: Admin access required")
    return user_id
