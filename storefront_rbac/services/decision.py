from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set, Union

from ..dal import IdentityDAL, IdentityStore, PermissionDAL, RoleDAL, UserRoleDAL
from ..models.permission import Action, Resource, permission_string
from ..schemas.check import PermissionDecision
from ..settings import settings
from .ids import is_object_id, require_object_id

log = logging.getLogger("rbac.decision")

ADMIN_STORES = (IdentityStore.admin, IdentityStore.user_management)


class DecisionEngine:
    """
    Answers "can this identity do this action on this resource, right now".

    Read-only and uncached: every call re-reads the ledger and the roles so a
    revocation takes effect on the very next request.
    """

    def __init__(
        self,
        *,
        user_role_dal: UserRoleDAL,
        role_dal: RoleDAL,
        permission_dal: PermissionDAL,
        identity_dal: IdentityDAL,
        timeout_seconds: Optional[float] = None,
    ):
        self.user_role_dal = user_role_dal
        self.role_dal = role_dal
        self.permission_dal = permission_dal
        self.identity_dal = identity_dal
        self.timeout_seconds = (
            settings.PERMISSION_CHECK_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        )

    async def check_permission(
        self,
        user_id: str,
        resource: Union[Resource, str],
        action: Union[Action, str],
    ) -> PermissionDecision:
        """
        Never raises. Faults and timeouts come back as a denial with failed=True.
        """
        try:
            return await asyncio.wait_for(
                self._evaluate(user_id, resource, action),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            log.warning(
                "permission check timed out user_id=%s perm=%s timeout=%ss",
                user_id,
                permission_string(resource, action),
                self.timeout_seconds,
            )
            return PermissionDecision(granted=False, reason="Permission check timed out", failed=True)
        except Exception:
            log.exception("permission check failed user_id=%s perm=%s", user_id, permission_string(resource, action))
            return PermissionDecision(granted=False, reason="Error checking permissions", failed=True)

    async def _evaluate(
        self,
        user_id: str,
        resource: Union[Resource, str],
        action: Union[Action, str],
    ) -> PermissionDecision:
        if not is_object_id(user_id):
            return PermissionDecision(granted=False, reason="Invalid user ID format")

        assignments = await self.user_role_dal.list_active(user_id.strip())
        if not assignments:
            return PermissionDecision(granted=False, reason="User has no assigned roles")

        roles = await self.role_dal.find_active_by_ids([a["role_id"] for a in assignments])
        r = resource.value if isinstance(resource, Resource) else str(resource)
        a = action.value if isinstance(action, Action) else str(action)
        for role in roles:
            if await self.permission_dal.any_match(role["permissions"], r, a):
                return PermissionDecision(granted=True)

        return PermissionDecision(
            granted=False,
            reason=f"User does not have permission for {permission_string(r, a)}",
        )

    async def is_admin(self, user_id: str) -> bool:
        """
        Identity-type check, independent of the role graph.
        """
        if not is_object_id(user_id):
            return False
        return await self.identity_dal.exists_in(user_id.strip(), ADMIN_STORES)

    async def has_role(self, user_id: str, role_name: str) -> bool:
        if not is_object_id(user_id):
            return False
        roles = await self._active_roles(user_id.strip())
        wanted = role_name.strip().lower()
        return any(r["name"].strip().lower() == wanted for r in roles)

    async def get_user_permissions(self, user_id: str) -> List[Dict[str, Any]]:
        """
        Union of permissions across the user's active roles, deduplicated by id,
        in role order then the order each role lists them.
        """
        uid = require_object_id(user_id, "user ID")
        roles = await self._active_roles(uid)
        ordered: List[str] = []
        seen: Set[str] = set()
        for role in roles:
            for pid in role["permissions"]:
                if pid not in seen:
                    seen.add(pid)
                    ordered.append(pid)
        docs = await self.permission_dal.get_many_by_ids(ordered)
        return [docs[pid] for pid in ordered if pid in docs]

    async def _active_roles(self, user_id: str) -> List[Dict[str, Any]]:
        assignments = await self.user_role_dal.list_active(user_id)
        if not assignments:
            return []
        return await self.role_dal.find_active_by_ids([a["role_id"] for a in assignments])
