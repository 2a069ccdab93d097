from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..settings import settings


class IdentityStore(str, Enum):
    admin = "admin"
    client = "client"
    user_management = "user_management"


class IdentityDAL:
    """
    Read-only view over the identity collections owned by user management.
    The RBAC subsystem only asks whether an id exists, and where.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.cols = {
            IdentityStore.admin: db[settings.COL_ADMINS],
            IdentityStore.client: db[settings.COL_CLIENTS],
            IdentityStore.user_management: db[settings.COL_USER_MANAGEMENT],
        }

    async def find_store(self, user_id: str) -> Optional[IdentityStore]:
        return await self._first_store(user_id, self.cols.keys())

    async def exists_in(self, user_id: str, stores: Iterable[IdentityStore]) -> bool:
        return await self._first_store(user_id, stores) is not None

    async def list_admins(self) -> List[Dict[str, Any]]:
        cur = self.cols[IdentityStore.admin].find({}, projection={"_id": 1, "email": 1})
        out = []
        async for d in cur:
            d["_id"] = str(d["_id"])
            out.append(d)
        return out

    async def _first_store(self, user_id: str, stores: Iterable[IdentityStore]) -> Optional[IdentityStore]:
        oid = ObjectId(user_id)
        for store in stores:
            if await self.cols[store].find_one({"_id": oid}, projection={"_id": 1}):
                return store
        return None
