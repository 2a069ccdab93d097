from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .permission import PermissionDoc


class RoleDoc(BaseModel):
    """
    Role with its permission references resolved into full permissions.

    Stored form keeps `permissions` as a list of ObjectIds; references to
    deleted permissions are dropped on resolution.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    description: Optional[str] = None
    permissions: List[PermissionDoc] = []
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
