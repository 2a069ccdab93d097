from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from starlette.responses import Response

from .dal import IdentityDAL, PermissionDAL, RoleDAL, UserRoleDAL
from .errors import register_error_handlers
from .logger import setup_logging
from .middleware import AuthenticationMiddleware, RequestIdMiddleware
from .routers import check_router, health_router, permission_router, role_router, user_role_router
from .services import AssignmentLedger, DecisionEngine, PermissionCatalog, RoleRegistry
from .settings import settings

setup_logging()
log = logging.getLogger("rbac")

app = FastAPI(title="Storefront RBAC Service", version="0.1.0")


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AuthenticationMiddleware)

register_error_handlers(app)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    start = time.time()

    log.info(
        "REQ method=%s path=%s query=%s client=%s",
        request.method,
        request.url.path,
        str(request.url.query),
        request.client.host if request.client else None,
    )

    try:
        resp: Response = await call_next(request)
        dur_ms = int((time.time() - start) * 1000)
        log.info("RES status=%s dur_ms=%s path=%s", resp.status_code, dur_ms, request.url.path)
        return resp
    except Exception:
        dur_ms = int((time.time() - start) * 1000)
        log.exception("ERR dur_ms=%s path=%s", dur_ms, request.url.path)
        raise


# added after the logging middleware so it wraps it and REQ/RES lines carry the id
app.add_middleware(RequestIdMiddleware)


async def init_state(app: FastAPI, db: AsyncIOMotorDatabase) -> None:
    """Build DALs and services on app.state for the given database."""
    app.state.mongo_db = db

    # DALs
    app.state.permission_dal = PermissionDAL(db)
    app.state.role_dal = RoleDAL(db)
    app.state.user_role_dal = UserRoleDAL(db)
    app.state.identity_dal = IdentityDAL(db)

    # indexes
    await app.state.permission_dal.ensure_indexes()
    await app.state.role_dal.ensure_indexes()
    await app.state.user_role_dal.ensure_indexes()

    # services
    app.state.permission_catalog = PermissionCatalog(permission_dal=app.state.permission_dal)
    app.state.role_registry = RoleRegistry(
        role_dal=app.state.role_dal,
        permission_dal=app.state.permission_dal,
    )
    app.state.assignment_ledger = AssignmentLedger(
        user_role_dal=app.state.user_role_dal,
        role_dal=app.state.role_dal,
        identity_dal=app.state.identity_dal,
        role_registry=app.state.role_registry,
    )
    app.state.decision_engine = DecisionEngine(
        user_role_dal=app.state.user_role_dal,
        role_dal=app.state.role_dal,
        permission_dal=app.state.permission_dal,
        identity_dal=app.state.identity_dal,
    )


@app.on_event("startup")
async def startup():
    log.info("startup begin mongo_db=%s", settings.MONGO_DB)

    client = AsyncIOMotorClient(settings.MONGO_URI)
    app.state.mongo_client = client
    await init_state(app, client[settings.MONGO_DB])

    log.info("startup complete")


@app.on_event("shutdown")
async def shutdown():
    c = getattr(app.state, "mongo_client", None)
    if c:
        c.close()


app.include_router(health_router)
app.include_router(permission_router, prefix=settings.API_PREFIX)
app.include_router(role_router, prefix=settings.API_PREFIX)
app.include_router(user_role_router, prefix=settings.API_PREFIX)
app.include_router(check_router, prefix=settings.API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("storefront_rbac.main:app", host="0.0.0.0", port=settings.PORT)
