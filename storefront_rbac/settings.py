from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RBAC_", env_file=".env", extra="ignore")

    # API
    PORT: int = 8040
    LOG_LEVEL: str = "INFO"
    # JSON list in the environment, e.g. RBAC_CORS_ALLOW_ORIGINS=["http://localhost:3000"]
    CORS_ALLOW_ORIGINS: List[str] = Field(default_factory=list)
    API_PREFIX: str = "/api/v1/rbac"

    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "ecommerce"

    # Collections owned by the RBAC subsystem
    COL_PERMISSIONS: str = "permissions"
    COL_ROLES: str = "roles"
    COL_USER_ROLES: str = "userroles"

    # Identity stores owned by user management (read-only here)
    COL_ADMINS: str = "admins"
    COL_CLIENTS: str = "clients"
    COL_USER_MANAGEMENT: str = "usermanagements"

    # Decision engine
    PERMISSION_CHECK_TIMEOUT_SECONDS: float = 2.0

    # Ledger
    ASSIGN_MAX_RETRIES: int = 3

    # Authentication (token verification only, issuance lives elsewhere)
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_USER_ID_CLAIM: str = "userId"


settings = Settings()
