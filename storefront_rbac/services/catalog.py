from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..dal import PermissionDAL, RoleDAL
from ..errors import NotFoundError, ValidationError
from .ids import require_object_id, valid_object_ids

log = logging.getLogger("rbac")


class PermissionCatalog:
    def __init__(self, *, permission_dal: PermissionDAL):
        self.permission_dal = permission_dal

    async def create(
        self,
        *,
        name: str,
        resource: str,
        action: str,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        doc = await self.permission_dal.create(name=name, resource=resource, action=action, description=description)
        log.info("permission created id=%s %s:%s", doc["_id"], doc["resource"], doc["action"])
        return doc

    async def list(self) -> List[Dict[str, Any]]:
        return await self.permission_dal.list()

    async def get(self, permission_id: str) -> Dict[str, Any]:
        pid = require_object_id(permission_id, "permission ID")
        d = await self.permission_dal.get(pid)
        if not d:
            raise NotFoundError("Permission not found")
        return d

    async def update(self, permission_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        pid = require_object_id(permission_id, "permission ID")
        d = await self.permission_dal.update(id=pid, patch=patch)
        if not d:
            raise NotFoundError("Permission not found")
        return d

    async def delete(self, permission_id: str) -> None:
        # roles keep dangling references; they never match during decisions
        pid = require_object_id(permission_id, "permission ID")
        if not await self.permission_dal.delete(id=pid):
            raise NotFoundError("Permission not found")
        log.info("permission deleted id=%s", pid)


class RoleRegistry:
    """
    Named permission bundles. Reads return roles with permissions resolved
    into full permission documents, in the order the role lists them.
    """

    def __init__(self, *, role_dal: RoleDAL, permission_dal: PermissionDAL):
        self.role_dal = role_dal
        self.permission_dal = permission_dal

    async def create(
        self,
        *,
        name: str,
        description: Optional[str] = None,
        permission_ids: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        ids = self._permission_ids(permission_ids or [])
        role = await self.role_dal.create(name=name, description=description, permission_ids=ids)
        log.info("role created id=%s name=%s permissions=%d", role["_id"], role["name"], len(ids))
        return await self.resolve(role)

    async def list(self) -> List[Dict[str, Any]]:
        roles = await self.role_dal.list(active_only=True)
        return await self.resolve_many(roles)

    async def get(self, role_id: str) -> Dict[str, Any]:
        rid = require_object_id(role_id, "role ID")
        role = await self.role_dal.get(rid)
        if not role:
            raise NotFoundError("Role not found")
        return await self.resolve(role)

    async def update(self, role_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        rid = require_object_id(role_id, "role ID")
        patch = dict(patch)
        if patch.get("permission_ids") is not None:
            patch["permission_ids"] = self._permission_ids(patch["permission_ids"])
        role = await self.role_dal.update(id=rid, patch=patch)
        if not role:
            raise NotFoundError("Role not found")
        return await self.resolve(role)

    async def add_permissions(self, role_id: str, permission_ids: List[str]) -> Dict[str, Any]:
        rid = require_object_id(role_id, "role ID")
        ids = valid_object_ids(permission_ids)
        if not ids:
            raise ValidationError("No valid permission IDs provided")
        role = await self.role_dal.add_permissions(id=rid, permission_ids=ids)
        if not role:
            raise NotFoundError("Role not found")
        return await self.resolve(role)

    async def remove_permissions(self, role_id: str, permission_ids: List[str]) -> Dict[str, Any]:
        rid = require_object_id(role_id, "role ID")
        role = await self.role_dal.remove_permissions(id=rid, permission_ids=valid_object_ids(permission_ids))
        if not role:
            raise NotFoundError("Role not found")
        return await self.resolve(role)

    async def soft_delete(self, role_id: str) -> None:
        rid = require_object_id(role_id, "role ID")
        if not await self.role_dal.set_active(id=rid, is_active=False):
            raise NotFoundError("Role not found")
        log.info("role deactivated id=%s", rid)

    async def resolve(self, role: Dict[str, Any]) -> Dict[str, Any]:
        return (await self.resolve_many([role]))[0]

    async def resolve_many(self, roles: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        wanted = {pid for r in roles for pid in r.get("permissions") or []}
        perms = await self.permission_dal.get_many_by_ids(wanted)
        out = []
        for r in roles:
            resolved = dict(r)
            resolved["permissions"] = [perms[pid] for pid in r.get("permissions") or [] if pid in perms]
            out.append(resolved)
        return out

    @staticmethod
    def _permission_ids(values: List[str]) -> List[str]:
        ids = valid_object_ids(values)
        if len(ids) != len(values):
            raise ValidationError("Invalid permission ID format")
        return ids
