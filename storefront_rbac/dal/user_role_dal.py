from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from ..errors import DuplicateError
from ..settings import settings

log = logging.getLogger("rbac.ledger")

ACTIVE_INDEX_NAME = "uniq_active_role_per_user"
# _id breaks ties between grants made within the same millisecond
NEWEST_FIRST = [("assigned_at", DESCENDING), ("_id", DESCENDING)]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _out(d: Dict[str, Any]) -> Dict[str, Any]:
    for k in ("_id", "user_id", "role_id", "assigned_by"):
        if d.get(k) is not None:
            d[k] = str(d[k])
    return d


class UserRoleDAL:
    """
    Append-oriented assignment ledger.

    At most one row per user has is_active=True; the partial unique index
    makes a second concurrent insert fail instead of silently succeeding.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db[settings.COL_USER_ROLES]

    async def ensure_indexes(self) -> None:
        await self.col.create_index([("user_id", ASCENDING), ("is_active", ASCENDING)])
        await self.col.create_index([("role_id", ASCENDING)])
        await self.col.create_index(
            [("user_id", ASCENDING)],
            name=ACTIVE_INDEX_NAME,
            unique=True,
            partialFilterExpression={"is_active": True},
        )

    async def replace_active(
        self,
        *,
        user_id: str,
        role_id: str,
        assigned_by: str,
        max_retries: int = 3,
    ) -> Dict[str, Any]:
        """
        Deactivate every active row for the user, then insert the new active row.
        A concurrent grant that slips in between the two steps trips the unique
        index; the sequence is then replayed so the last writer ends up active.
        """
        uid = ObjectId(user_id)
        attempts = 0
        while True:
            now = _now()
            await self.col.update_many(
                {"user_id": uid, "is_active": True},
                {"$set": {"is_active": False, "deactivated_at": now, "updated_at": now}},
            )
            doc = {
                "user_id": uid,
                "role_id": ObjectId(role_id),
                "assigned_by": ObjectId(assigned_by),
                "assigned_at": now,
                "is_active": True,
                "deactivated_at": None,
                "created_at": now,
                "updated_at": now,
            }
            try:
                res = await self.col.insert_one(doc)
            except DuplicateKeyError:
                attempts += 1
                if attempts > max_retries:
                    raise DuplicateError(f"Concurrent role assignment for user {user_id}, retry later")
                log.warning("assignment race user_id=%s attempt=%s, replaying", user_id, attempts)
                continue
            doc["_id"] = res.inserted_id
            return _out(doc)

    async def list_active(self, user_id: str) -> List[Dict[str, Any]]:
        cur = self.col.find({"user_id": ObjectId(user_id), "is_active": True}).sort(NEWEST_FIRST)
        return [_out(d) async for d in cur]

    async def list_history(self, user_id: str) -> List[Dict[str, Any]]:
        cur = self.col.find({"user_id": ObjectId(user_id)}).sort(NEWEST_FIRST)
        return [_out(d) async for d in cur]

    async def count_active(self, user_id: str) -> int:
        return await self.col.count_documents({"user_id": ObjectId(user_id), "is_active": True})

    async def deactivate(self, *, user_id: str, role_id: str) -> int:
        now = _now()
        r = await self.col.update_many(
            {"user_id": ObjectId(user_id), "role_id": ObjectId(role_id), "is_active": True},
            {"$set": {"is_active": False, "deactivated_at": now, "updated_at": now}},
        )
        return r.modified_count
