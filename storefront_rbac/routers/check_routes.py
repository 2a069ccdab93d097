from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..middleware.permissions import require_admin, require_authenticated
from ..schemas import BootstrapReport, MyPermissionCheckRequest, PermissionCheckRequest, PermissionDecision
from ..seeds.seed_rbac import bootstrap

router = APIRouter(tags=["rbac.checks"])


@router.post("/check-permission", response_model=PermissionDecision, dependencies=[Depends(require_admin)])
async def check_permission(request: Request, body: PermissionCheckRequest):
    engine = request.app.state.decision_engine
    return await engine.check_permission(body.user_id, body.resource, body.action)


@router.get("/user-permissions/{user_id}", dependencies=[Depends(require_admin)])
async def get_user_permissions(request: Request, user_id: str):
    engine = request.app.state.decision_engine
    return {"items": await engine.get_user_permissions(user_id)}


@router.get("/my-permissions")
async def get_my_permissions(request: Request, user_id: str = Depends(require_authenticated)):
    engine = request.app.state.decision_engine
    return {"items": await engine.get_user_permissions(user_id)}


@router.post("/check-my-permission", response_model=PermissionDecision)
async def check_my_permission(
    request: Request,
    body: MyPermissionCheckRequest,
    user_id: str = Depends(require_authenticated),
):
    engine = request.app.state.decision_engine
    return await engine.check_permission(user_id, body.resource, body.action)


@router.post("/initialize", response_model=BootstrapReport, dependencies=[Depends(require_admin)])
async def initialize_defaults(request: Request):
    return await bootstrap(request.app.state.mongo_db)
