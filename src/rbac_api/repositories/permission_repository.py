"""Permission repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import or_, select

from rbac_api.models.orm.permission import PermissionORM
from rbac_api.repositories.base import BaseRepository
from rbac_api.utils.validation import escape_like_wildcards


class PermissionRepository(BaseRepository[PermissionORM]):
    """Repository for permission operations."""

    model = PermissionORM

    def _search_filter(self, search: str) -> Any:
        # Permissions also match on description
        pattern = f"%{escape_like_wildcards(search)}%"
        return or_(
            PermissionORM.name.ilike(pattern, escape="\\"),
            PermissionORM.description.ilike(pattern, escape="\\"),
        )

    async def get_existing_ids(self, ids: list[UUID]) -> set[UUID]:
        """Return the subset of ``ids`` that refer to stored permissions.

        Args:
            ids: Permission UUIDs to check

        Returns:
            Set of UUIDs that exist
        """
        if not ids:
            return set()
        result = await self.session.execute(
            select(PermissionORM.id).where(PermissionORM.id.in_(ids))
        )
        return set(result.scalars().all())
