from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..models.permission import Action, Resource


class PermissionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    resource: Resource
    action: Action
    description: Optional[str] = None


class PermissionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    resource: Optional[Resource] = None
    action: Optional[Action] = None
    description: Optional[str] = None
