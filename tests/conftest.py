from __future__ import annotations

from types import SimpleNamespace

import httpx
import jwt
import pytest
from bson import ObjectId
from mongomock_motor import AsyncMongoMockClient

from storefront_rbac.dal import IdentityDAL, PermissionDAL, RoleDAL, UserRoleDAL
from storefront_rbac.services import AssignmentLedger, DecisionEngine, PermissionCatalog, RoleRegistry
from storefront_rbac.settings import settings


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def db():
    return AsyncMongoMockClient()["rbac_test"]


@pytest.fixture
async def rbac(db):
    permission_dal = PermissionDAL(db)
    role_dal = RoleDAL(db)
    user_role_dal = UserRoleDAL(db)
    identity_dal = IdentityDAL(db)
    for dal in (permission_dal, role_dal, user_role_dal):
        await dal.ensure_indexes()

    registry = RoleRegistry(role_dal=role_dal, permission_dal=permission_dal)
    return SimpleNamespace(
        db=db,
        permission_dal=permission_dal,
        role_dal=role_dal,
        user_role_dal=user_role_dal,
        identity_dal=identity_dal,
        catalog=PermissionCatalog(permission_dal=permission_dal),
        registry=registry,
        ledger=AssignmentLedger(
            user_role_dal=user_role_dal,
            role_dal=role_dal,
            identity_dal=identity_dal,
            role_registry=registry,
        ),
        engine=DecisionEngine(
            user_role_dal=user_role_dal,
            role_dal=role_dal,
            permission_dal=permission_dal,
            identity_dal=identity_dal,
        ),
    )


async def add_identity(db, collection: str, email: str | None = None) -> str:
    res = await db[collection].insert_one({"email": email or f"{ObjectId()}@example.com"})
    return str(res.inserted_id)


@pytest.fixture
def make_admin(db):
    async def _make(email: str | None = None) -> str:
        return await add_identity(db, settings.COL_ADMINS, email)

    return _make


@pytest.fixture
def make_client(db):
    async def _make(email: str | None = None) -> str:
        return await add_identity(db, settings.COL_CLIENTS, email)

    return _make


def _bearer(user_id: str) -> dict:
    token = jwt.encode({settings.JWT_USER_ID_CLAIM: user_id}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def api(db):
    from storefront_rbac.main import app, init_state

    await init_state(app, db)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def bearer():
    return _bearer
