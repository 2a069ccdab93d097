from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..middleware.permissions import require_admin, require_authenticated
from ..models import PermissionDoc
from ..schemas import PermissionCreate, PermissionUpdate

router = APIRouter(prefix="/permissions", tags=["rbac.permissions"])


@router.post("", status_code=201, response_model=PermissionDoc, dependencies=[Depends(require_admin)])
async def create_permission(request: Request, payload: PermissionCreate):
    catalog = request.app.state.permission_catalog
    return await catalog.create(
        name=payload.name,
        resource=payload.resource,
        action=payload.action,
        description=payload.description,
    )


@router.get("", dependencies=[Depends(require_authenticated)])
async def list_permissions(request: Request):
    catalog = request.app.state.permission_catalog
    return {"items": await catalog.list()}


@router.get("/{permission_id}", response_model=PermissionDoc, dependencies=[Depends(require_admin)])
async def get_permission(request: Request, permission_id: str):
    return await request.app.state.permission_catalog.get(permission_id)


@router.put("/{permission_id}", response_model=PermissionDoc, dependencies=[Depends(require_admin)])
async def update_permission(request: Request, permission_id: str, payload: PermissionUpdate):
    catalog = request.app.state.permission_catalog
    return await catalog.update(permission_id, payload.model_dump(exclude_unset=True))


@router.delete("/{permission_id}", dependencies=[Depends(require_admin)])
async def delete_permission(request: Request, permission_id: str):
    await request.app.state.permission_catalog.delete(permission_id)
    return {"ok": True}
