"""Role-permission association repository."""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.models.orm.permission import PermissionORM
from rbac_api.models.orm.role import RoleORM
from rbac_api.models.orm.role_permission import RolePermissionORM


class RolePermissionRepository:
    """Repository for the role_permissions junction table."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.session = session

    async def get(self, role_id: UUID, permission_id: UUID) -> RolePermissionORM | None:
        """Get an association row.

        Args:
            role_id: Role UUID
            permission_id: Permission UUID

        Returns:
            RolePermissionORM or None if the role does not hold the permission
        """
        result = await self.session.execute(
            select(RolePermissionORM)
            .where(RolePermissionORM.role_id == role_id)
            .where(RolePermissionORM.permission_id == permission_id)
        )
        return result.scalar_one_or_none()

    async def exists(self, role_id: UUID, permission_id: UUID) -> bool:
        """Check whether a role holds a permission."""
        return await self.get(role_id, permission_id) is not None

    async def create(self, role_id: UUID, permission_id: UUID) -> RolePermissionORM:
        """Insert an association row.

        Args:
            role_id: Role UUID
            permission_id: Permission UUID

        Returns:
            Created RolePermissionORM
        """
        instance = RolePermissionORM(role_id=role_id, permission_id=permission_id)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, role_id: UUID, permission_id: UUID) -> int:
        """Delete one association row.

        Returns:
            Number of rows removed (0 or 1)
        """
        result = await self.session.execute(
            delete(RolePermissionORM)
            .where(RolePermissionORM.role_id == role_id)
            .where(RolePermissionORM.permission_id == permission_id)
        )
        return result.rowcount

    async def delete_by_role(self, role_id: UUID) -> int:
        """Delete every association of a role.

        Returns:
            Number of rows removed
        """
        result = await self.session.execute(
            delete(RolePermissionORM).where(RolePermissionORM.role_id == role_id)
        )
        return result.rowcount

    async def delete_by_permission(self, permission_id: UUID) -> int:
        """Delete every association of a permission.

        Returns:
            Number of rows removed
        """
        result = await self.session.execute(
            delete(RolePermissionORM).where(RolePermissionORM.permission_id == permission_id)
        )
        return result.rowcount

    async def get_permission_ids_for_role(self, role_id: UUID) -> set[UUID]:
        """Get the IDs of all permissions a role holds."""
        result = await self.session.execute(
            select(RolePermissionORM.permission_id).where(RolePermissionORM.role_id == role_id)
        )
        return set(result.scalars().all())

    async def add_many(self, role_id: UUID, permission_ids: list[UUID]) -> int:
        """Grant several permissions to a role, skipping ones already held.

        Returns:
            Number of rows inserted
        """
        held = await self.get_permission_ids_for_role(role_id)
        new_ids = [pid for pid in dict.fromkeys(permission_ids) if pid not in held]
        for permission_id in new_ids:
            self.session.add(RolePermissionORM(role_id=role_id, permission_id=permission_id))
        await self.session.flush()
        return len(new_ids)

    async def remove_many(self, role_id: UUID, permission_ids: list[UUID]) -> int:
        """Revoke several permissions from a role.

        Returns:
            Number of rows removed
        """
        result = await self.session.execute(
            delete(RolePermissionORM)
            .where(RolePermissionORM.role_id == role_id)
            .where(RolePermissionORM.permission_id.in_(permission_ids))
        )
        return result.rowcount

    async def list_pairs(self) -> list[tuple[UUID, UUID]]:
        """Get every (role_id, permission_id) pair."""
        result = await self.session.execute(
            select(RolePermissionORM.role_id, RolePermissionORM.permission_id)
        )
        return [(row.role_id, row.permission_id) for row in result.all()]

    async def list_with_details(
        self,
        role_id: UUID | None = None,
        permission_id: UUID | None = None,
    ) -> list[tuple[RolePermissionORM, RoleORM, PermissionORM]]:
        """Get associations joined with their role and permission.

        Args:
            role_id: Optional role filter
            permission_id: Optional permission filter

        Returns:
            List of (association, role, permission) ordered by role then permission name
        """
        query = (
            select(RolePermissionORM, RoleORM, PermissionORM)
            .join(RoleORM, RoleORM.id == RolePermissionORM.role_id)
            .join(PermissionORM, PermissionORM.id == RolePermissionORM.permission_id)
        )
        if role_id is not None:
            query = query.where(RolePermissionORM.role_id == role_id)
        if permission_id is not None:
            query = query.where(RolePermissionORM.permission_id == permission_id)

        result = await self.session.execute(query.order_by(RoleORM.name, PermissionORM.name))
        return [(row[0], row[1], row[2]) for row in result.all()]

    async def count(self) -> int:
        """Count association rows."""
        result = await self.session.execute(
            select(func.count()).select_from(RolePermissionORM)
        )
        return result.scalar_one()
