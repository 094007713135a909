"""Permission service."""

import logging
import math
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.exceptions import PermissionAlreadyExistsError, PermissionNotFoundError
from rbac_api.models.dto.permission import (
    PermissionCreate,
    PermissionListResponse,
    PermissionResponse,
    PermissionUpdate,
)
from rbac_api.models.orm.permission import PermissionORM
from rbac_api.repositories.permission_repository import PermissionRepository
from rbac_api.repositories.role_permission_repository import RolePermissionRepository
from rbac_api.services.cache_service import CacheService
from rbac_api.utils.validation import sanitize_search

logger = logging.getLogger(__name__)


class PermissionService:
    """Service for permission CRUD.

    Used both by the REST handlers and by the command executor so that a
    natural-language command and the equivalent API call end in the same state.
    """

    def __init__(self, session: AsyncSession, cache: CacheService | None = None) -> None:
        """Initialize service with database session."""
        self.session = session
        self.cache = cache
        self.permission_repo = PermissionRepository(session)
        self.association_repo = RolePermissionRepository(session)

    async def _commit(self) -> None:
        # Caches are cleared only once the change is visible to other sessions
        await self.session.commit()
        if self.cache is not None:
            await self.cache.invalidate_dashboard()

    async def _get_or_raise(self, permission_id: UUID) -> PermissionORM:
        permission = await self.permission_repo.get_by_id(permission_id)
        if permission is None:
            raise PermissionNotFoundError(str(permission_id))
        return permission

    async def list_permissions(
        self,
        query: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> PermissionListResponse:
        """List permissions with optional search on name and description.

        Args:
            query: Substring filter
            limit: Page size
            offset: Number of records to skip

        Returns:
            PermissionListResponse
        """
        items, total = await self.permission_repo.get_all(
            search=sanitize_search(query), offset=offset, limit=limit
        )
        return PermissionListResponse(
            items=[PermissionResponse.model_validate(p) for p in items],
            total=total,
            page=offset // limit + 1,
            page_size=limit,
            total_pages=math.ceil(total / limit),
        )

    async def get_permission(self, permission_id: UUID) -> PermissionResponse:
        """Get a permission by ID.

        Raises:
            PermissionNotFoundError: If the permission does not exist
        """
        return PermissionResponse.model_validate(await self._get_or_raise(permission_id))

    async def find_by_name(self, name: str) -> PermissionORM | None:
        """Look up a permission by name, ignoring case."""
        return await self.permission_repo.get_by_name(name)

    async def create_permission(self, data: PermissionCreate) -> PermissionResponse:
        """Create a permission.

        Args:
            data: Validated create request

        Returns:
            Created permission

        Raises:
            PermissionAlreadyExistsError: If the name is already taken
        """
        if await self.permission_repo.name_taken(data.name):
            raise PermissionAlreadyExistsError(data.name)

        try:
            permission = await self.permission_repo.create(
                name=data.name, description=data.description
            )
        except IntegrityError as e:
            # Lost a race with a concurrent insert of the same name
            await self.session.rollback()
            raise PermissionAlreadyExistsError(data.name) from e

        logger.info(f"Created permission {permission.name}")
        await self._commit()
        return PermissionResponse.model_validate(permission)

    async def update_permission(
        self, permission_id: UUID, data: PermissionUpdate
    ) -> PermissionResponse:
        """Update a permission's name and/or description.

        Raises:
            PermissionNotFoundError: If the permission does not exist
            PermissionAlreadyExistsError: If the new name is taken by another permission
        """
        permission = await self._get_or_raise(permission_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("name") is None:
            changes.pop("name", None)

        new_name = changes.get("name")
        current_name = permission.name
        if new_name and await self.permission_repo.name_taken(new_name, exclude_id=permission.id):
            raise PermissionAlreadyExistsError(new_name)

        try:
            permission = await self.permission_repo.update(permission, **changes)
        except IntegrityError as e:
            await self.session.rollback()
            raise PermissionAlreadyExistsError(new_name or current_name) from e

        await self._commit()
        return PermissionResponse.model_validate(permission)

    async def delete_permission(self, permission_id: UUID) -> int:
        """Delete a permission after removing every role association to it.

        Args:
            permission_id: Permission UUID

        Returns:
            Number of association rows removed

        Raises:
            PermissionNotFoundError: If the permission does not exist
        """
        permission = await self._get_or_raise(permission_id)
        removed = await self.association_repo.delete_by_permission(permission.id)
        await self.permission_repo.delete(permission)

        logger.info(f"Deleted permission {permission.name} and {removed} role association(s)")
        await self._commit()
        return removed
