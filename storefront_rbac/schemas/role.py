from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class RoleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    permission_ids: List[str] = []


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    permission_ids: Optional[List[str]] = None
    is_active: Optional[bool] = None


class RolePermissionsPatch(BaseModel):
    permission_ids: List[str] = Field(min_length=1)
