# storefront_rbac/seeds/assign_admin_roles.py
from __future__ import annotations

"""
Ops tooling: give every admin identity without an active assignment one of
the standard roles, using the fixed email -> role mapping.

Run after seed_rbac:
  python -m storefront_rbac.seeds.assign_admin_roles
"""

import asyncio
import logging
from typing import Dict

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ..dal import IdentityDAL, PermissionDAL, RoleDAL, UserRoleDAL
from ..logger import setup_logging
from ..services import AssignmentLedger, RoleRegistry
from ..settings import settings
from .defaults import ADMIN_ROLE_BY_EMAIL, DEFAULT_ADMIN_ROLE, STANDARD_ROLES

log = logging.getLogger("rbac.seed")


async def assign_admin_roles(db: AsyncIOMotorDatabase) -> Dict[str, str]:
    """
    Returns {admin_id: role name} for the admins that got a role in this run.
    """
    role_dal = RoleDAL(db)
    user_role_dal = UserRoleDAL(db)
    identity_dal = IdentityDAL(db)
    ledger = AssignmentLedger(
        user_role_dal=user_role_dal,
        role_dal=role_dal,
        identity_dal=identity_dal,
        role_registry=RoleRegistry(role_dal=role_dal, permission_dal=PermissionDAL(db)),
    )

    roles = {}
    for entry in STANDARD_ROLES:
        r = await role_dal.get_by_name(entry.name)
        if not r:
            raise RuntimeError(f"Standard role missing: {entry.name}; run seed_rbac first")
        roles[entry.name] = r

    assigned: Dict[str, str] = {}
    for admin in await identity_dal.list_admins():
        admin_id = admin["_id"]
        if await user_role_dal.count_active(admin_id):
            log.info("admin already has a role id=%s email=%s", admin_id, admin.get("email"))
            continue
        role_name = ADMIN_ROLE_BY_EMAIL.get((admin.get("email") or "").lower(), DEFAULT_ADMIN_ROLE)
        # self-assigned: there is no other actor at bootstrap time
        await ledger.assign(user_id=admin_id, role_id=roles[role_name]["_id"], assigned_by=admin_id)
        assigned[admin_id] = role_name
    return assigned


async def main() -> None:
    client = AsyncIOMotorClient(settings.MONGO_URI)
    try:
        assigned = await assign_admin_roles(client[settings.MONGO_DB])
    finally:
        client.close()
    print(f"Role assignment complete: {len(assigned)} admin(s) updated.")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
