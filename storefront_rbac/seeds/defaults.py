"""
Default permission catalog and standard role definitions.

Roles are computed from a snapshot of the permission collection by a pure
function, so re-running the bootstrap after the catalog grows gives the
same answer for the same snapshot. Membership rules are explicit per role:
adding a permission never silently changes what "Admin" excludes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Tuple

from ..models.permission import Action, Resource

CRUD = (Action.create, Action.read, Action.update, Action.delete)

_LABELS: Dict[Resource, Tuple[str, str]] = {
    # resource -> (display noun, description noun)
    Resource.users: ("Users", "users"),
    Resource.products: ("Products", "products"),
    Resource.categories: ("Categories", "categories"),
    Resource.orders: ("Orders", "orders"),
    Resource.coupons: ("Coupons", "coupons"),
    Resource.content: ("Content", "content"),
    Resource.reports: ("Reports", "reports"),
    Resource.company_settings: ("Company Settings", "company settings"),
    Resource.shipping_addresses: ("Shipping Addresses", "shipping addresses"),
    Resource.courier: ("Courier Credentials", "courier credentials and configurations"),
}

_VERBS = {
    Action.create: ("Create", "Create"),
    Action.read: ("Read", "View"),
    Action.update: ("Update", "Update"),
    Action.delete: ("Delete", "Delete"),
}


@dataclass(frozen=True)
class PermissionDef:
    resource: Resource
    action: Action
    name: str
    description: str


def _crud_defs() -> List[PermissionDef]:
    out = []
    for resource, (noun, desc_noun) in _LABELS.items():
        for action in CRUD:
            verb, desc_verb = _VERBS[action]
            out.append(PermissionDef(resource, action, f"{verb} {noun}", f"{desc_verb} {desc_noun}"))
    return out


DEFAULT_PERMISSIONS: List[PermissionDef] = _crud_defs() + [
    PermissionDef(
        Resource.courier,
        Action.manage,
        "Manage Courier Operations",
        "Manage courier operations and order integrations",
    ),
]


SUPER_ADMIN = "Super Admin"
ADMIN = "Admin"
MANAGER = "Manager"
VIEWER = "Viewer"

# Capabilities reserved to Super Admin.
ADMIN_DENYLIST: FrozenSet[Tuple[str, str]] = frozenset(
    {
        (Resource.users.value, Action.delete.value),
        (Resource.company_settings.value, Action.delete.value),
        (Resource.courier.value, Action.delete.value),
        (Resource.courier.value, Action.manage.value),
    }
)


@dataclass(frozen=True)
class RoleDef:
    name: str
    description: str
    includes: Callable[[str, str], bool]


STANDARD_ROLES: List[RoleDef] = [
    RoleDef(SUPER_ADMIN, "Full system access with all permissions", lambda r, a: True),
    RoleDef(
        ADMIN,
        "Administrative access with most permissions",
        lambda r, a: (r, a) not in ADMIN_DENYLIST,
    ),
    RoleDef(
        MANAGER,
        "Management access with read and update permissions",
        lambda r, a: a in (Action.read.value, Action.update.value),
    ),
    RoleDef(VIEWER, "Read-only access to most resources", lambda r, a: a == Action.read.value),
]


def plan_default_roles(permissions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Desired role -> permission ids mapping for a permission snapshot.
    Returns one dict per standard role: name, description, permission_ids.
    """
    plan = []
    for entry in STANDARD_ROLES:
        ids = [p["_id"] for p in permissions if entry.includes(p["resource"], p["action"])]
        plan.append({"name": entry.name, "description": entry.description, "permission_ids": ids})
    return plan


# Ops-only: which standard role each seeded admin identity gets.
ADMIN_ROLE_BY_EMAIL: Dict[str, str] = {
    "admin@ecommerce.com": SUPER_ADMIN,
    "manager@ecommerce.com": MANAGER,
    "viewer@ecommerce.com": VIEWER,
}
DEFAULT_ADMIN_ROLE = ADMIN
