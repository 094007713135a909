"""Role repository."""

from rbac_api.models.orm.role import RoleORM
from rbac_api.repositories.base import BaseRepository


class RoleRepository(BaseRepository[RoleORM]):
    """Repository for role operations."""

    model = RoleORM
