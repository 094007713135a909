"""Role-permission association service."""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.exceptions import (
    AssociationAlreadyExistsError,
    AssociationNotFoundError,
    NotFoundError,
    PermissionNotFoundError,
    RoleNotFoundError,
)
from rbac_api.models.dto.association import (
    AssociationDetail,
    AssociationListResponse,
    AssociationResponse,
    BulkAssociationRequest,
    BulkAssociationResponse,
)
from rbac_api.models.orm.permission import PermissionORM
from rbac_api.models.orm.role import RoleORM
from rbac_api.repositories.permission_repository import PermissionRepository
from rbac_api.repositories.role_permission_repository import RolePermissionRepository
from rbac_api.repositories.role_repository import RoleRepository
from rbac_api.services.cache_service import CacheService

logger = logging.getLogger(__name__)


class AssociationService:
    """Service for granting and revoking permissions on roles."""

    def __init__(self, session: AsyncSession, cache: CacheService | None = None) -> None:
        """Initialize service with database session."""
        self.session = session
        self.cache = cache
        self.role_repo = RoleRepository(session)
        self.permission_repo = PermissionRepository(session)
        self.association_repo = RolePermissionRepository(session)

    async def _commit(self) -> None:
        # Caches are cleared only once the change is visible to other sessions
        await self.session.commit()
        if self.cache is not None:
            await self.cache.invalidate_dashboard()

    async def _resolve(self, role_id: UUID, permission_id: UUID) -> tuple[RoleORM, PermissionORM]:
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise RoleNotFoundError(str(role_id))
        permission = await self.permission_repo.get_by_id(permission_id)
        if permission is None:
            raise PermissionNotFoundError(str(permission_id))
        return role, permission

    async def list_associations(
        self,
        role_id: UUID | None = None,
        permission_id: UUID | None = None,
    ) -> AssociationListResponse:
        """List associations with role and permission names.

        Args:
            role_id: Only associations of this role
            permission_id: Only associations of this permission

        Returns:
            AssociationListResponse
        """
        rows = await self.association_repo.list_with_details(role_id, permission_id)
        items = [
            AssociationDetail(
                role_id=role.id,
                role_name=role.name,
                permission_id=permission.id,
                permission_name=permission.name,
                permission_description=permission.description,
            )
            for _, role, permission in rows
        ]
        return AssociationListResponse(items=items, total=len(items))

    async def create_association(self, role_id: UUID, permission_id: UUID) -> AssociationResponse:
        """Grant a permission to a role.

        Raises:
            RoleNotFoundError: If the role does not exist
            PermissionNotFoundError: If the permission does not exist
            AssociationAlreadyExistsError: If the role already holds the permission
        """
        role, permission = await self._resolve(role_id, permission_id)
        role_name, permission_name = role.name, permission.name
        if await self.association_repo.exists(role.id, permission.id):
            raise AssociationAlreadyExistsError(role_name, permission_name)

        try:
            association = await self.association_repo.create(role.id, permission.id)
        except IntegrityError as e:
            await self.session.rollback()
            raise AssociationAlreadyExistsError(role_name, permission_name) from e

        logger.info(f"Assigned permission {permission_name} to role {role_name}")
        await self._commit()
        return AssociationResponse.model_validate(association)

    async def delete_association(self, role_id: UUID, permission_id: UUID) -> None:
        """Revoke a permission from a role.

        Raises:
            RoleNotFoundError: If the role does not exist
            PermissionNotFoundError: If the permission does not exist
            AssociationNotFoundError: If the role does not hold the permission
        """
        role, permission = await self._resolve(role_id, permission_id)
        removed = await self.association_repo.delete(role.id, permission.id)
        if removed == 0:
            raise AssociationNotFoundError(role.name, permission.name)

        logger.info(f"Removed permission {permission.name} from role {role.name}")
        await self._commit()

    async def bulk_update(self, request: BulkAssociationRequest) -> BulkAssociationResponse:
        """Assign or unassign several permissions for one role.

        Assigning skips permissions the role already holds; unassigning
        ignores permissions the role does not hold.

        Raises:
            RoleNotFoundError: If the role does not exist
            NotFoundError: If any permission ID does not exist
        """
        role = await self.role_repo.get_by_id(request.role_id)
        if role is None:
            raise RoleNotFoundError(str(request.role_id))

        permission_ids = list(dict.fromkeys(request.permission_ids))
        found = await self.permission_repo.get_existing_ids(permission_ids)
        missing = [str(pid) for pid in permission_ids if pid not in found]
        if missing:
            raise NotFoundError(
                "Some permissions not found", {"missing_permission_ids": missing}
            )

        if request.operation == "assign":
            affected = await self.association_repo.add_many(role.id, permission_ids)
            message = f"Successfully assigned {len(permission_ids)} permissions to role"
        else:
            affected = await self.association_repo.remove_many(role.id, permission_ids)
            message = f"Successfully unassigned {len(permission_ids)} permissions from role"

        logger.info(f"Bulk {request.operation} on role {role.name}: {affected} row(s) changed")
        await self._commit()
        return BulkAssociationResponse(
            message=message,
            role_id=role.id,
            permission_ids=permission_ids,
            operation=request.operation,
            affected=affected,
        )
