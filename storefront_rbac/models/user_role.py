from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .role import RoleDoc


class UserRoleDoc(BaseModel):
    """
    One row of the assignment ledger. Rows are deactivated, never deleted.

    user_id is a weak reference into one of the identity stores.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    user_id: str
    role_id: str
    assigned_by: str
    assigned_at: datetime
    is_active: bool
    deactivated_at: Optional[datetime] = None
    role: Optional[RoleDoc] = None
    created_at: datetime
    updated_at: datetime
