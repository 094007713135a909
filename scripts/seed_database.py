#!/usr/bin/env python
"""Seed the database with sample permissions, roles and grants.

Safe to run repeatedly: existing rows are left untouched.
"""

import asyncio

from rbac_api.database import async_session_maker
from rbac_api.models.orm import PermissionORM, RoleORM
from rbac_api.repositories.permission_repository import PermissionRepository
from rbac_api.repositories.role_permission_repository import RolePermissionRepository
from rbac_api.repositories.role_repository import RoleRepository

PERMISSIONS = {
    "read_users": "Permission to view user information",
    "write_users": "Permission to create and update users",
    "delete_users": "Permission to delete users",
    "read_reports": "Permission to view reports",
    "write_reports": "Permission to create and update reports",
    "admin_access": "Full administrative access to the system",
}

ROLE_GRANTS = {
    "Admin": list(PERMISSIONS),
    "Manager": ["read_users", "write_users", "read_reports", "write_reports"],
    "User": ["read_users", "read_reports"],
    "Viewer": ["read_reports"],
}


async def seed_database() -> None:
    """Insert the sample data that is not already present."""
    async with async_session_maker() as session:
        permission_repo = PermissionRepository(session)
        role_repo = RoleRepository(session)
        association_repo = RolePermissionRepository(session)

        permissions: dict[str, PermissionORM] = {}
        for name, description in PERMISSIONS.items():
            permission = await permission_repo.get_by_name(name)
            if permission is None:
                permission = await permission_repo.create(name=name, description=description)
                print(f"Permission: {name}")
            permissions[name] = permission

        roles: dict[str, RoleORM] = {}
        for name in ROLE_GRANTS:
            role = await role_repo.get_by_name(name)
            if role is None:
                role = await role_repo.create(name=name)
                print(f"Role: {name}")
            roles[name] = role

        granted = 0
        for role_name, permission_names in ROLE_GRANTS.items():
            granted += await association_repo.add_many(
                roles[role_name].id, [permissions[p].id for p in permission_names]
            )

        await session.commit()

    print(f"Seeding completed: {granted} new association(s)")


if __name__ == "__main__":
    asyncio.run(seed_database())
