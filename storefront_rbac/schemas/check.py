from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from ..models.permission import Action, Resource


class PermissionCheckRequest(BaseModel):
    user_id: str
    resource: Resource
    action: Action


class MyPermissionCheckRequest(BaseModel):
    resource: Resource
    action: Action


class PermissionDecision(BaseModel):
    """
    Outcome of a permission check.

    failed marks a denial caused by a fault (store error, timeout) rather than
    by the role graph; enforcement turns it into a 500, never a grant.
    """
    granted: bool
    reason: Optional[str] = None
    failed: bool = False


class BootstrapReport(BaseModel):
    permissions_created: List[str] = []
    roles_created: List[str] = []
