from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ..middleware.permissions import require_admin
from ..models import UserRoleDoc
from ..schemas import UserRoleAssign, UserRoleRemove

router = APIRouter(prefix="/user-roles", tags=["rbac.user-roles"])


@router.post("/assign", status_code=201, response_model=UserRoleDoc)
async def assign_role(request: Request, payload: UserRoleAssign, admin_id: str = Depends(require_admin)):
    ledger = request.app.state.assignment_ledger
    return await ledger.assign(user_id=payload.user_id, role_id=payload.role_id, assigned_by=admin_id)


@router.get("/{user_id}", dependencies=[Depends(require_admin)])
async def get_user_roles(request: Request, user_id: str, include_history: bool = False):
    """
    Active assignment(s) for the user with the role resolved. With
    include_history, deactivated rows are returned too, newest first.
    """
    ledger = request.app.state.assignment_ledger
    if include_history:
        return {"items": await ledger.get_history(user_id)}
    return {"items": await ledger.get_active_roles(user_id)}


@router.delete("/remove", dependencies=[Depends(require_admin)])
async def remove_role(request: Request, payload: UserRoleRemove):
    ledger = request.app.state.assignment_ledger
    if not await ledger.revoke(user_id=payload.user_id, role_id=payload.role_id):
        raise HTTPException(404, "User role assignment not found")
    return {"ok": True}
