from .check_routes import router as check_router
from .health_routes import router as health_router
from .permission_routes import router as permission_router
from .role_routes import router as role_router
from .user_role_routes import router as user_role_router

__all__ = [
    "check_router",
    "health_router",
    "permission_router",
    "role_router",
    "user_role_router",
]
