# storefront_rbac/seeds/seed_rbac.py
from __future__ import annotations

"""
RBAC bootstrap: default permission catalog + the four standard roles.

Run:
  python -m storefront_rbac.seeds.seed_rbac

Notes:
- Idempotent: safe to run multiple times.
- Uses DALs directly (no need to run the API).
- Existing roles are never overwritten; only missing ones are inserted.
"""

import asyncio
import logging
from typing import Dict, List

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ..dal import PermissionDAL, RoleDAL, UserRoleDAL
from ..errors import DuplicateError
from ..logger import setup_logging
from ..settings import settings
from .defaults import DEFAULT_PERMISSIONS, plan_default_roles

log = logging.getLogger("rbac.seed")


# ------------------------------------------------------------------------------
# Idempotent ensure_* helpers
# ------------------------------------------------------------------------------
async def ensure_permission(permission_dal: PermissionDAL, *, name: str, resource: str, action: str, description: str) -> bool:
    existing = await permission_dal.get_by_resource_action(resource, action)
    if existing:
        return False
    try:
        await permission_dal.create(name=name, resource=resource, action=action, description=description)
    except DuplicateError:
        # race / already exists
        return False
    return True


async def ensure_role(role_dal: RoleDAL, *, name: str, description: str, permission_ids: List[str]) -> bool:
    existing = await role_dal.get_by_name(name)
    if existing:
        return False
    try:
        await role_dal.create(name=name, description=description, permission_ids=permission_ids)
    except DuplicateError:
        return False
    return True


# ------------------------------------------------------------------------------
# Seed operations
# ------------------------------------------------------------------------------
async def seed_permissions(permission_dal: PermissionDAL) -> List[str]:
    created = []
    for entry in DEFAULT_PERMISSIONS:
        if await ensure_permission(
            permission_dal,
            name=entry.name,
            resource=entry.resource.value,
            action=entry.action.value,
            description=entry.description,
        ):
            created.append(f"{entry.resource.value}:{entry.action.value}")
    return created


async def seed_roles(role_dal: RoleDAL, permission_dal: PermissionDAL) -> List[str]:
    snapshot = await permission_dal.list()
    created = []
    for role in plan_default_roles(snapshot):
        if await ensure_role(role_dal, **role):
            created.append(role["name"])
    return created


async def bootstrap(db: AsyncIOMotorDatabase) -> Dict[str, List[str]]:
    """
    Public helper used by the /initialize route, scripts and tests.
    """
    permission_dal = PermissionDAL(db)
    role_dal = RoleDAL(db)

    await permission_dal.ensure_indexes()
    await role_dal.ensure_indexes()
    await UserRoleDAL(db).ensure_indexes()

    perms = await seed_permissions(permission_dal)
    roles = await seed_roles(role_dal, permission_dal)
    log.info("bootstrap complete permissions_created=%d roles_created=%d", len(perms), len(roles))
    return {"permissions_created": perms, "roles_created": roles}


# ------------------------------------------------------------------------------
# Main entrypoint
# ------------------------------------------------------------------------------
async def main() -> None:
    client = AsyncIOMotorClient(settings.MONGO_URI)
    try:
        report = await bootstrap(client[settings.MONGO_DB])
    finally:
        client.close()
    print(
        "Seed complete: %d permissions, %d roles created (idempotent)."
        % (len(report["permissions_created"]), len(report["roles_created"]))
    )


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
