from .permission import Action, PermissionDoc, Resource, permission_string
from .role import RoleDoc
from .user_role import UserRoleDoc

__all__ = [
    "Action",
    "Resource",
    "permission_string",
    "PermissionDoc",
    "RoleDoc",
    "UserRoleDoc",
]
