from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..errors import DuplicateError
from ..settings import settings


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _out(d: Dict[str, Any]) -> Dict[str, Any]:
    d["_id"] = str(d["_id"])
    d["permissions"] = [str(p) for p in d.get("permissions") or []]
    return d


class RoleDAL:
    """
    Roles keep permission references as ObjectIds. Returned dicts carry
    them as strings; resolution into full permissions happens in the registry.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db[settings.COL_ROLES]

    async def ensure_indexes(self) -> None:
        await self.col.create_index([("name", ASCENDING)], unique=True)
        await self.col.create_index([("is_active", ASCENDING)])

    async def create(
        self,
        *,
        name: str,
        description: Optional[str],
        permission_ids: List[str],
        is_active: bool = True,
    ) -> Dict[str, Any]:
        now = _now()
        doc = {
            "name": name.strip(),
            "description": description.strip() if isinstance(description, str) else None,
            # dict.fromkeys keeps first-seen order while dropping repeats
            "permissions": [ObjectId(p) for p in dict.fromkeys(permission_ids or [])],
            "is_active": is_active,
            "created_at": now,
            "updated_at": now,
        }
        try:
            res = await self.col.insert_one(doc)
        except DuplicateKeyError:
            raise DuplicateError(f"Role already exists: {doc['name']}")
        doc["_id"] = res.inserted_id
        return _out(doc)

    async def get(self, id: str) -> Optional[Dict[str, Any]]:
        d = await self.col.find_one({"_id": ObjectId(id)})
        return _out(d) if d else None

    async def get_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        d = await self.col.find_one({"name": name})
        return _out(d) if d else None

    async def list(self, *, active_only: bool = True) -> List[Dict[str, Any]]:
        query = {"is_active": True} if active_only else {}
        cur = self.col.find(query).sort("name", ASCENDING)
        return [_out(d) async for d in cur]

    async def find_active_by_ids(self, ids: Iterable[str]) -> List[Dict[str, Any]]:
        oids = [ObjectId(i) for i in ids]
        if not oids:
            return []
        cur = self.col.find({"_id": {"$in": oids}, "is_active": True})
        found = {str(d["_id"]): _out(d) async for d in cur}
        # keep the caller's order (most recent assignment first)
        return [found[str(o)] for o in oids if str(o) in found]

    async def count(self) -> int:
        return await self.col.count_documents({})

    async def update(self, *, id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        patch = {k: v for k, v in patch.items() if v is not None}
        if isinstance(patch.get("name"), str):
            patch["name"] = patch["name"].strip()
        if "permission_ids" in patch:
            patch["permissions"] = [ObjectId(p) for p in dict.fromkeys(patch.pop("permission_ids"))]
        patch["updated_at"] = _now()
        try:
            r = await self.col.find_one_and_update(
                {"_id": ObjectId(id)},
                {"$set": patch},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise DuplicateError(f"Role already exists: {patch.get('name')}")
        return _out(r) if r else None

    async def add_permissions(self, *, id: str, permission_ids: List[str]) -> Optional[Dict[str, Any]]:
        # $addToSet is an atomic set-union, safe under concurrent callers
        r = await self.col.find_one_and_update(
            {"_id": ObjectId(id)},
            {
                "$addToSet": {"permissions": {"$each": [ObjectId(p) for p in permission_ids]}},
                "$set": {"updated_at": _now()},
            },
            return_document=ReturnDocument.AFTER,
        )
        return _out(r) if r else None

    async def remove_permissions(self, *, id: str, permission_ids: List[str]) -> Optional[Dict[str, Any]]:
        r = await self.col.find_one_and_update(
            {"_id": ObjectId(id)},
            {
                "$pull": {"permissions": {"$in": [ObjectId(p) for p in permission_ids]}},
                "$set": {"updated_at": _now()},
            },
            return_document=ReturnDocument.AFTER,
        )
        return _out(r) if r else None

    async def set_active(self, *, id: str, is_active: bool) -> bool:
        r = await self.col.update_one(
            {"_id": ObjectId(id)},
            {"$set": {"is_active": is_active, "updated_at": _now()}},
        )
        return r.matched_count == 1
