"""Role service."""

import logging
import math
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.exceptions import RoleAlreadyExistsError, RoleNotFoundError
from rbac_api.models.dto.role import RoleCreate, RoleListResponse, RoleResponse, RoleUpdate
from rbac_api.models.orm.role import RoleORM
from rbac_api.repositories.role_permission_repository import RolePermissionRepository
from rbac_api.repositories.role_repository import RoleRepository
from rbac_api.services.cache_service import CacheService
from rbac_api.utils.validation import sanitize_search

logger = logging.getLogger(__name__)


class RoleService:
    """Service for role CRUD."""

    def __init__(self, session: AsyncSession, cache: CacheService | None = None) -> None:
        """Initialize service with database session."""
        self.session = session
        self.cache = cache
        self.role_repo = RoleRepository(session)
        self.association_repo = RolePermissionRepository(session)

    async def _commit(self) -> None:
        # Caches are cleared only once the change is visible to other sessions
        await self.session.commit()
        if self.cache is not None:
            await self.cache.invalidate_dashboard()

    async def _get_or_raise(self, role_id: UUID) -> RoleORM:
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise RoleNotFoundError(str(role_id))
        return role

    async def list_roles(
        self,
        query: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> RoleListResponse:
        """List roles with optional name search."""
        items, total = await self.role_repo.get_all(
            search=sanitize_search(query), offset=offset, limit=limit
        )
        return RoleListResponse(
            items=[RoleResponse.model_validate(r) for r in items],
            total=total,
            page=offset // limit + 1,
            page_size=limit,
            total_pages=math.ceil(total / limit),
        )

    async def get_role(self, role_id: UUID) -> RoleResponse:
        """Get a role by ID.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        return RoleResponse.model_validate(await self._get_or_raise(role_id))

    async def find_by_name(self, name: str) -> RoleORM | None:
        """Look up a role by name, ignoring case."""
        return await self.role_repo.get_by_name(name)

    async def create_role(self, data: RoleCreate) -> RoleResponse:
        """Create a role.

        Raises:
            RoleAlreadyExistsError: If the name is already taken
        """
        if await self.role_repo.name_taken(data.name):
            raise RoleAlreadyExistsError(data.name)

        try:
            role = await self.role_repo.create(name=data.name)
        except IntegrityError as e:
            await self.session.rollback()
            raise RoleAlreadyExistsError(data.name) from e

        logger.info(f"Created role {role.name}")
        await self._commit()
        return RoleResponse.model_validate(role)

    async def update_role(self, role_id: UUID, data: RoleUpdate) -> RoleResponse:
        """Rename a role.

        Raises:
            RoleNotFoundError: If the role does not exist
            RoleAlreadyExistsError: If the new name is taken by another role
        """
        role = await self._get_or_raise(role_id)
        if data.name is None:
            return RoleResponse.model_validate(role)

        if await self.role_repo.name_taken(data.name, exclude_id=role.id):
            raise RoleAlreadyExistsError(data.name)

        try:
            role = await self.role_repo.update(role, name=data.name)
        except IntegrityError as e:
            await self.session.rollback()
            raise RoleAlreadyExistsError(data.name) from e

        await self._commit()
        return RoleResponse.model_validate(role)

    async def delete_role(self, role_id: UUID) -> int:
        """Delete a role after removing all of its permission associations.

        Returns:
            Number of association rows removed

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        role = await self._get_or_raise(role_id)
        removed = await self.association_repo.delete_by_role(role.id)
        await self.role_repo.delete(role)

        logger.info(f"Deleted role {role.name} and {removed} permission association(s)")
        await self._commit()
        return removed
