import pytest

from storefront_rbac.seeds.assign_admin_roles import assign_admin_roles
from storefront_rbac.seeds.defaults import (
    ADMIN,
    ADMIN_DENYLIST,
    DEFAULT_PERMISSIONS,
    MANAGER,
    SUPER_ADMIN,
    VIEWER,
    plan_default_roles,
)
from storefront_rbac.seeds.seed_rbac import bootstrap

pytestmark = pytest.mark.anyio


def test_default_catalog_shape():
    pairs = {(p.resource.value, p.action.value) for p in DEFAULT_PERMISSIONS}
    assert len(DEFAULT_PERMISSIONS) == 41
    assert len(pairs) == 41
    assert len({p.name for p in DEFAULT_PERMISSIONS}) == 41
    assert ("courier", "manage") in pairs
    assert ("company-settings", "delete") in pairs


def test_plan_is_a_pure_function_of_the_snapshot():
    snapshot = [
        {"_id": "a", "resource": "orders", "action": "read"},
        {"_id": "b", "resource": "users", "action": "delete"},
        {"_id": "c", "resource": "orders", "action": "update"},
    ]
    first = plan_default_roles(snapshot)
    assert first == plan_default_roles(list(snapshot))

    by_name = {r["name"]: r["permission_ids"] for r in first}
    assert by_name[SUPER_ADMIN] == ["a", "b", "c"]
    assert by_name[ADMIN] == ["a", "c"]
    assert by_name[MANAGER] == ["a", "c"]
    assert by_name[VIEWER] == ["a"]


async def test_bootstrap_seeds_catalog_and_roles(rbac):
    report = await bootstrap(rbac.db)

    assert len(report["permissions_created"]) == 41
    assert report["roles_created"] == [SUPER_ADMIN, ADMIN, MANAGER, VIEWER]

    sizes = {}
    for role in await rbac.registry.list():
        sizes[role["name"]] = len(role["permissions"])
    assert sizes == {SUPER_ADMIN: 41, ADMIN: 37, MANAGER: 20, VIEWER: 10}

    admin = await rbac.role_dal.get_by_name(ADMIN)
    admin_perms = await rbac.permission_dal.get_many_by_ids(admin["permissions"])
    granted = {(p["resource"], p["action"]) for p in admin_perms.values()}
    assert granted.isdisjoint(ADMIN_DENYLIST)


async def test_bootstrap_is_idempotent(rbac):
    await bootstrap(rbac.db)
    second = await bootstrap(rbac.db)

    assert second == {"permissions_created": [], "roles_created": []}
    assert await rbac.permission_dal.count() == 41
    assert await rbac.role_dal.count() == 4


async def test_bootstrap_leaves_existing_roles_alone(rbac):
    await rbac.registry.create(name=VIEWER, description="custom")

    report = await bootstrap(rbac.db)

    assert VIEWER not in report["roles_created"]
    viewer = await rbac.role_dal.get_by_name(VIEWER)
    assert viewer["description"] == "custom"
    assert viewer["permissions"] == []


async def test_bootstrap_keeps_custom_permissions(rbac):
    await rbac.catalog.create(name="Read Orders", resource="orders", action="read", description="mine")

    report = await bootstrap(rbac.db)

    assert "orders:read" not in report["permissions_created"]
    assert len(report["permissions_created"]) == 40
    row = await rbac.permission_dal.get_by_resource_action("orders", "read")
    assert row["description"] == "mine"


async def test_assign_admin_roles_uses_email_mapping(rbac, make_admin):
    await bootstrap(rbac.db)
    root = await make_admin("Admin@ecommerce.com")
    manager = await make_admin("manager@ecommerce.com")
    other = await make_admin("ops@ecommerce.com")

    assigned = await assign_admin_roles(rbac.db)

    assert assigned == {root: SUPER_ADMIN, manager: MANAGER, other: ADMIN}
    assert await rbac.engine.has_role(root, SUPER_ADMIN)
    assert (await rbac.engine.check_permission(root, "courier", "manage")).granted
    assert not (await rbac.engine.check_permission(other, "users", "delete")).granted
    assert (await rbac.engine.check_permission(manager, "orders", "update")).granted


async def test_assign_admin_roles_skips_admins_with_a_role(rbac, make_admin):
    await bootstrap(rbac.db)
    viewer = await rbac.role_dal.get_by_name(VIEWER)
    admin = await make_admin("admin@ecommerce.com")
    await rbac.ledger.assign(user_id=admin, role_id=viewer["_id"], assigned_by=admin)

    assert await assign_admin_roles(rbac.db) == {}
    assert await rbac.engine.has_role(admin, VIEWER)
    assert await rbac.user_role_dal.count_active(admin) == 1


async def test_assign_admin_roles_requires_bootstrap(rbac, make_admin):
    await make_admin()
    with pytest.raises(RuntimeError):
        await assign_admin_roles(rbac.db)
