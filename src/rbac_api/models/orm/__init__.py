"""SQLAlchemy ORM models package."""

from rbac_api.models.orm.base import Base
from rbac_api.models.orm.permission import PermissionORM
from rbac_api.models.orm.role import RoleORM
from rbac_api.models.orm.role_permission import RolePermissionORM

__all__ = [
    "Base",
    "PermissionORM",
    "RoleORM",
    "RolePermissionORM",
]
