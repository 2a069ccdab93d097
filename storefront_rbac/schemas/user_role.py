from __future__ import annotations

from pydantic import BaseModel


class UserRoleAssign(BaseModel):
    user_id: str
    role_id: str


class UserRoleRemove(BaseModel):
    user_id: str
    role_id: str
