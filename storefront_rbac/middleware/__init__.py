from .authentication import AuthenticationMiddleware
from .request_id import RequestIdFilter, RequestIdMiddleware
from .permissions import (
    current_user_id,
    require_admin,
    require_all_permissions,
    require_any_permission,
    require_authenticated,
    require_permission,
)

__all__ = [
    "AuthenticationMiddleware",
    "RequestIdFilter",
    "RequestIdMiddleware",
    "current_user_id",
    "require_admin",
    "require_all_permissions",
    "require_any_permission",
    "require_authenticated",
    "require_permission",
]
