from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..dal import IdentityDAL, RoleDAL, UserRoleDAL
from ..errors import NotFoundError
from ..settings import settings
from .catalog import RoleRegistry
from .ids import require_object_id

log = logging.getLogger("rbac.ledger")


class AssignmentLedger:
    """
    Grants and revokes roles. Rows are only ever deactivated so the full
    history stays available for audit.
    """

    def __init__(
        self,
        *,
        user_role_dal: UserRoleDAL,
        role_dal: RoleDAL,
        identity_dal: IdentityDAL,
        role_registry: RoleRegistry,
    ):
        self.user_role_dal = user_role_dal
        self.role_dal = role_dal
        self.identity_dal = identity_dal
        self.role_registry = role_registry

    async def assign(self, *, user_id: str, role_id: str, assigned_by: str) -> Dict[str, Any]:
        uid = require_object_id(user_id)
        rid = require_object_id(role_id)
        by = require_object_id(assigned_by)

        store = await self.identity_dal.find_store(uid)
        if store is None:
            raise NotFoundError("User not found")

        if not await self.role_dal.get(rid):
            raise NotFoundError("Role not found")

        row = await self.user_role_dal.replace_active(
            user_id=uid,
            role_id=rid,
            assigned_by=by,
            max_retries=settings.ASSIGN_MAX_RETRIES,
        )
        log.info("role assigned user_id=%s store=%s role_id=%s by=%s", uid, store.value, rid, by)
        return row

    async def get_active_roles(self, user_id: str) -> List[Dict[str, Any]]:
        """
        Active rows for the user, newest first, each with its role resolved.
        In the supported model there is at most one.
        """
        uid = require_object_id(user_id, "user ID")
        rows = await self.user_role_dal.list_active(uid)
        return await self._with_roles(rows)

    async def get_history(self, user_id: str) -> List[Dict[str, Any]]:
        uid = require_object_id(user_id, "user ID")
        rows = await self.user_role_dal.list_history(uid)
        return await self._with_roles(rows)

    async def revoke(self, *, user_id: str, role_id: str) -> bool:
        uid = require_object_id(user_id)
        rid = require_object_id(role_id)
        modified = await self.user_role_dal.deactivate(user_id=uid, role_id=rid)
        if modified:
            log.info("role revoked user_id=%s role_id=%s rows=%s", uid, rid, modified)
        return modified > 0

    async def _with_roles(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        out = []
        for row in rows:
            role = await self.role_dal.get(row["role_id"])
            row["role"] = await self.role_registry.resolve(role) if role else None
            out.append(row)
        return out
