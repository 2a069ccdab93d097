from .check import (
    BootstrapReport,
    MyPermissionCheckRequest,
    PermissionCheckRequest,
    PermissionDecision,
)
from .permission import PermissionCreate, PermissionUpdate
from .role import RoleCreate, RolePermissionsPatch, RoleUpdate
from .user_role import UserRoleAssign, UserRoleRemove

__all__ = [
    "BootstrapReport",
    "MyPermissionCheckRequest",
    "PermissionCheckRequest",
    "PermissionDecision",
    "PermissionCreate",
    "PermissionUpdate",
    "RoleCreate",
    "RolePermissionsPatch",
    "RoleUpdate",
    "UserRoleAssign",
    "UserRoleRemove",
]
