from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Resource(str, Enum):
    users = "users"
    products = "products"
    categories = "categories"
    orders = "orders"
    coupons = "coupons"
    content = "content"
    reports = "reports"
    company_settings = "company-settings"
    shipping_addresses = "shipping-addresses"
    courier = "courier"


class Action(str, Enum):
    create = "create"
    read = "read"
    update = "update"
    delete = "delete"
    manage = "manage"


def permission_string(resource: Union[Resource, str], action: Union[Action, str]) -> str:
    """'products:create' style key used in reasons and error payloads."""
    r = resource.value if isinstance(resource, Resource) else str(resource)
    a = action.value if isinstance(action, Action) else str(action)
    return f"{r}:{a}"


class PermissionDoc(BaseModel):
    """
    Stored in MongoDB.

    (resource, action) is the capability; name is a human label and is unique.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    resource: Resource
    action: Action
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
