from .identity_dal import IdentityDAL, IdentityStore
from .permission_dal import PermissionDAL
from .role_dal import RoleDAL
from .user_role_dal import UserRoleDAL

__all__ = ["IdentityDAL", "IdentityStore", "PermissionDAL", "RoleDAL", "UserRoleDAL"]
