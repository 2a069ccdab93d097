import asyncio

import pytest
from bson import ObjectId

from storefront_rbac.errors import ValidationError
from storefront_rbac.models import Action, Resource
from storefront_rbac.services import DecisionEngine

pytestmark = pytest.mark.anyio


@pytest.fixture
async def setup(rbac, make_admin):
    perms = {}
    for resource, action in [("products", "create"), ("products", "delete"), ("orders", "read"), ("courier", "manage")]:
        p = await rbac.catalog.create(name=f"{resource} {action}", resource=resource, action=action)
        perms[f"{resource}:{action}"] = p["_id"]
    admin = await make_admin()
    user = await make_admin()
    return perms, admin, user


async def test_editor_scenario(rbac, setup):
    perms, admin, user = setup
    editor = await rbac.registry.create(name="Editor", permission_ids=[perms["products:create"]])
    await rbac.ledger.assign(user_id=user, role_id=editor["_id"], assigned_by=admin)

    ok = await rbac.engine.check_permission(user, "products", "create")
    assert ok.granted is True
    assert ok.reason is None

    denied = await rbac.engine.check_permission(user, Resource.products, Action.delete)
    assert denied.granted is False
    assert "products:delete" in denied.reason
    assert denied.failed is False


async def test_no_roles_is_denied_everywhere(rbac, setup):
    _, _, user = setup
    for resource in Resource:
        for action in Action:
            d = await rbac.engine.check_permission(user, resource, action)
            assert d.granted is False
            assert d.reason == "User has no assigned roles"


async def test_invalid_user_id_is_a_denial_not_an_error(rbac):
    d = await rbac.engine.check_permission("12345", "products", "read")
    assert d.granted is False
    assert d.reason == "Invalid user ID format"
    assert d.failed is False


async def test_soft_deleted_role_grants_nothing(rbac, setup):
    perms, admin, user = setup
    role_a = await rbac.registry.create(name="RoleA", permission_ids=[perms["orders:read"]])
    role_b = await rbac.registry.create(name="RoleB", permission_ids=[perms["products:create"]])
    await rbac.ledger.assign(user_id=user, role_id=role_a["_id"], assigned_by=admin)
    await rbac.ledger.assign(user_id=user, role_id=role_b["_id"], assigned_by=admin)
    assert (await rbac.engine.check_permission(user, "products", "create")).granted is True

    await rbac.registry.soft_delete(role_b["_id"])

    assert (await rbac.engine.check_permission(user, "products", "create")).granted is False
    # RoleA was replaced, not merely shadowed
    assert (await rbac.engine.check_permission(user, "orders", "read")).granted is False


async def test_revocation_takes_effect_immediately(rbac, setup):
    perms, admin, user = setup
    role = await rbac.registry.create(name="Buyer", permission_ids=[perms["orders:read"]])
    await rbac.ledger.assign(user_id=user, role_id=role["_id"], assigned_by=admin)
    assert (await rbac.engine.check_permission(user, "orders", "read")).granted is True

    await rbac.ledger.revoke(user_id=user, role_id=role["_id"])

    d = await rbac.engine.check_permission(user, "orders", "read")
    assert d.granted is False
    assert d.reason == "User has no assigned roles"


async def test_permission_changes_take_effect_on_next_check(rbac, setup):
    perms, admin, user = setup
    role = await rbac.registry.create(name="Ops")
    await rbac.ledger.assign(user_id=user, role_id=role["_id"], assigned_by=admin)
    assert (await rbac.engine.check_permission(user, "courier", "manage")).granted is False

    await rbac.registry.add_permissions(role["_id"], [perms["courier:manage"]])
    assert (await rbac.engine.check_permission(user, "courier", "manage")).granted is True

    await rbac.registry.remove_permissions(role["_id"], [perms["courier:manage"]])
    assert (await rbac.engine.check_permission(user, "courier", "manage")).granted is False


async def test_match_is_exact(rbac, setup):
    perms, admin, user = setup
    role = await rbac.registry.create(name="Buyer", permission_ids=[perms["orders:read"]])
    await rbac.ledger.assign(user_id=user, role_id=role["_id"], assigned_by=admin)

    assert (await rbac.engine.check_permission(user, "orders", "rea")).granted is False
    assert (await rbac.engine.check_permission(user, "order", "read")).granted is False
    assert (await rbac.engine.check_permission(user, "ORDERS", "read")).granted is False


async def test_deleted_permission_never_matches(rbac, setup):
    perms, admin, user = setup
    role = await rbac.registry.create(name="Buyer", permission_ids=[perms["orders:read"]])
    await rbac.ledger.assign(user_id=user, role_id=role["_id"], assigned_by=admin)

    await rbac.catalog.delete(perms["orders:read"])
    assert (await rbac.engine.check_permission(user, "orders", "read")).granted is False


async def test_is_admin_is_identity_based(rbac, db, make_admin, make_client):
    admin = await make_admin()
    client = await make_client()
    res = await db["usermanagements"].insert_one({"email": "staff@example.com"})

    assert await rbac.engine.is_admin(admin) is True
    assert await rbac.engine.is_admin(str(res.inserted_id)) is True
    assert await rbac.engine.is_admin(client) is False
    assert await rbac.engine.is_admin(str(ObjectId())) is False
    assert await rbac.engine.is_admin("nope") is False


async def test_has_role_is_case_insensitive(rbac, setup, make_client):
    _, admin, _ = setup
    client = await make_client()
    role = await rbac.registry.create(name="Admin")
    await rbac.ledger.assign(user_id=client, role_id=role["_id"], assigned_by=admin)

    assert await rbac.engine.has_role(client, "admin") is True
    assert await rbac.engine.has_role(client, "ADMIN ") is True
    assert await rbac.engine.has_role(client, "viewer") is False

    await rbac.registry.soft_delete(role["_id"])
    assert await rbac.engine.has_role(client, "admin") is False


async def test_get_user_permissions_in_role_order(rbac, setup):
    perms, admin, user = setup
    role = await rbac.registry.create(
        name="Ops",
        permission_ids=[perms["orders:read"], perms["products:create"], perms["orders:read"]],
    )
    await rbac.ledger.assign(user_id=user, role_id=role["_id"], assigned_by=admin)

    got = await rbac.engine.get_user_permissions(user)
    assert [p["_id"] for p in got] == [perms["orders:read"], perms["products:create"]]
    assert got[0]["resource"] == "orders"


async def test_get_user_permissions_skips_deleted(rbac, setup):
    perms, admin, user = setup
    role = await rbac.registry.create(name="Ops", permission_ids=[perms["orders:read"], perms["courier:manage"]])
    await rbac.ledger.assign(user_id=user, role_id=role["_id"], assigned_by=admin)
    await rbac.catalog.delete(perms["orders:read"])

    got = await rbac.engine.get_user_permissions(user)
    assert [p["_id"] for p in got] == [perms["courier:manage"]]


async def test_get_user_permissions_empty_and_invalid(rbac, setup):
    _, _, user = setup
    assert await rbac.engine.get_user_permissions(user) == []
    with pytest.raises(ValidationError):
        await rbac.engine.get_user_permissions("bad")


class _SlowLedger:
    async def list_active(self, user_id):
        await asyncio.sleep(1)
        return []


class _BrokenLedger:
    async def list_active(self, user_id):
        raise RuntimeError("store unavailable")


async def test_timeout_fails_closed(rbac):
    engine = DecisionEngine(
        user_role_dal=_SlowLedger(),
        role_dal=rbac.role_dal,
        permission_dal=rbac.permission_dal,
        identity_dal=rbac.identity_dal,
        timeout_seconds=0.01,
    )
    d = await engine.check_permission(str(ObjectId()), "orders", "read")
    assert d.granted is False
    assert d.failed is True
    assert d.reason == "Permission check timed out"


async def test_store_error_fails_closed(rbac):
    engine = DecisionEngine(
        user_role_dal=_BrokenLedger(),
        role_dal=rbac.role_dal,
        permission_dal=rbac.permission_dal,
        identity_dal=rbac.identity_dal,
    )
    d = await engine.check_permission(str(ObjectId()), "orders", "read")
    assert d.granted is False
    assert d.failed is True
    assert d.reason == "Error checking permissions"
