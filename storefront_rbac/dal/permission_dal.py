from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..errors import DuplicateError
from ..settings import settings


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _plain(v: Any) -> Any:
    return v.value if isinstance(v, Enum) else v


def _out(d: Dict[str, Any]) -> Dict[str, Any]:
    d["_id"] = str(d["_id"])
    return d


class PermissionDAL:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db[settings.COL_PERMISSIONS]

    async def ensure_indexes(self) -> None:
        await self.col.create_index([("name", ASCENDING)], unique=True)
        await self.col.create_index([("resource", ASCENDING), ("action", ASCENDING)], unique=True)

    async def create(
        self,
        *,
        name: str,
        resource: str,
        action: str,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        now = _now()
        doc = {
            "name": name.strip(),
            "resource": _plain(resource),
            "action": _plain(action),
            "description": description.strip() if isinstance(description, str) else None,
            "created_at": now,
            "updated_at": now,
        }
        try:
            res = await self.col.insert_one(doc)
        except DuplicateKeyError:
            raise DuplicateError(
                f"Permission already exists: {doc['name']} ({doc['resource']}:{doc['action']})"
            )
        doc["_id"] = str(res.inserted_id)
        return doc

    async def get(self, id: str) -> Optional[Dict[str, Any]]:
        d = await self.col.find_one({"_id": ObjectId(id)})
        return _out(d) if d else None

    async def get_by_resource_action(self, resource: str, action: str) -> Optional[Dict[str, Any]]:
        d = await self.col.find_one({"resource": _plain(resource), "action": _plain(action)})
        return _out(d) if d else None

    async def get_many_by_ids(self, ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """
        Batch fetch to avoid N calls for N permissions.
        Returns map: id -> doc. Ids with no row are simply absent.
        """
        oids = list({ObjectId(i) for i in ids})
        if not oids:
            return {}
        out: Dict[str, Dict[str, Any]] = {}
        async for d in self.col.find({"_id": {"$in": oids}}):
            d = _out(d)
            out[d["_id"]] = d
        return out

    async def any_match(self, ids: Iterable[str], resource: str, action: str) -> bool:
        """True if one of `ids` is the exact (resource, action) capability."""
        oids = [ObjectId(i) for i in ids]
        if not oids:
            return False
        d = await self.col.find_one(
            {"_id": {"$in": oids}, "resource": _plain(resource), "action": _plain(action)},
            projection={"_id": 1},
        )
        return d is not None

    async def list(self, *, limit: int = 0, skip: int = 0) -> List[Dict[str, Any]]:
        cur = self.col.find({}).sort([("resource", ASCENDING), ("action", ASCENDING)])
        if skip:
            cur = cur.skip(skip)
        if limit:
            cur = cur.limit(limit)
        return [_out(d) async for d in cur]

    async def count(self) -> int:
        return await self.col.count_documents({})

    async def update(self, *, id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        patch = {k: _plain(v) for k, v in patch.items() if v is not None}
        patch["updated_at"] = _now()
        try:
            r = await self.col.find_one_and_update(
                {"_id": ObjectId(id)},
                {"$set": patch},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise DuplicateError("Another permission already uses this name or resource:action")
        return _out(r) if r else None

    async def delete(self, *, id: str) -> bool:
        r = await self.col.delete_one({"_id": ObjectId(id)})
        return r.deleted_count == 1
