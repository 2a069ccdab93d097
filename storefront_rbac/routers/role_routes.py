from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..middleware.permissions import require_admin, require_authenticated
from ..models import RoleDoc
from ..schemas import RoleCreate, RolePermissionsPatch, RoleUpdate

router = APIRouter(prefix="/roles", tags=["rbac.roles"])


@router.post("", status_code=201, response_model=RoleDoc, dependencies=[Depends(require_admin)])
async def create_role(request: Request, payload: RoleCreate):
    registry = request.app.state.role_registry
    return await registry.create(
        name=payload.name,
        description=payload.description,
        permission_ids=payload.permission_ids,
    )


@router.get("", dependencies=[Depends(require_authenticated)])
async def list_roles(request: Request):
    return {"items": await request.app.state.role_registry.list()}


@router.get("/{role_id}", response_model=RoleDoc, dependencies=[Depends(require_admin)])
async def get_role(request: Request, role_id: str):
    return await request.app.state.role_registry.get(role_id)


@router.put("/{role_id}", response_model=RoleDoc, dependencies=[Depends(require_admin)])
async def update_role(request: Request, role_id: str, payload: RoleUpdate):
    registry = request.app.state.role_registry
    return await registry.update(role_id, payload.model_dump(exclude_unset=True))


@router.delete("/{role_id}", dependencies=[Depends(require_admin)])
async def delete_role(request: Request, role_id: str):
    # soft delete: assignments referencing the role stay, but stop granting
    await request.app.state.role_registry.soft_delete(role_id)
    return {"ok": True}


@router.post("/{role_id}/permissions", response_model=RoleDoc, dependencies=[Depends(require_admin)])
async def add_role_permissions(request: Request, role_id: str, payload: RolePermissionsPatch):
    registry = request.app.state.role_registry
    return await registry.add_permissions(role_id, payload.permission_ids)


@router.delete("/{role_id}/permissions", response_model=RoleDoc, dependencies=[Depends(require_admin)])
async def remove_role_permissions(request: Request, role_id: str, payload: RolePermissionsPatch):
    registry = request.app.state.role_registry
    return await registry.remove_permissions(role_id, payload.permission_ids)
