"""Snapshot of the RBAC inventory used to interpret and validate commands."""

from uuid import UUID

from pydantic import BaseModel, Field


class PermissionRef(BaseModel):
    """Permission as seen in a context snapshot."""

    id: UUID
    name: str
    description: str | None = None

    model_config = {"from_attributes": True}


class RoleRef(BaseModel):
    """Role as seen in a context snapshot."""

    id: UUID
    name: str

    model_config = {"from_attributes": True}


class AssociationRef(BaseModel):
    """Role-permission pair as seen in a context snapshot."""

    role_id: UUID
    permission_id: UUID

    model_config = {"from_attributes": True}


class RbacContext(BaseModel):
    """Point-in-time view of permissions, roles and associations.

    Name lookups are case-insensitive, matching how names are resolved
    throughout the API.
    """

    permissions: list[PermissionRef] = Field(default_factory=list)
    roles: list[RoleRef] = Field(default_factory=list)
    associations: list[AssociationRef] = Field(default_factory=list)

    def find_permission(self, name: str) -> PermissionRef | None:
        wanted = name.lower()
        return next((p for p in self.permissions if p.name.lower() == wanted), None)

    def find_role(self, name: str) -> RoleRef | None:
        wanted = name.lower()
        return next((r for r in self.roles if r.name.lower() == wanted), None)

    def has_association(self, role_id: UUID, permission_id: UUID) -> bool:
        return any(
            a.role_id == role_id and a.permission_id == permission_id
            for a in self.associations
        )

    def describe(self) -> str:
        """Render the inventory as the plain-text block embedded in prompts."""
        permissions = "\n".join(
            f"- {p.name} ({p.description})" if p.description else f"- {p.name}"
            for p in self.permissions
        )
        roles = "\n".join(f"- {r.name}" for r in self.roles)

        role_names = {r.id: r.name for r in self.roles}
        permission_names = {p.id: p.name for p in self.permissions}
        associations = "\n".join(
            f"- {role_names.get(a.role_id, 'Unknown Role')} has "
            f"{permission_names.get(a.permission_id, 'Unknown Permission')}"
            for a in self.associations
        )

        return (
            "Current RBAC System State:\n\n"
            f"PERMISSIONS:\n{permissions or 'No permissions defined'}\n\n"
            f"ROLES:\n{roles or 'No roles defined'}\n\n"
            f"ROLE-PERMISSION ASSOCIATIONS:\n{associations or 'No associations defined'}"
        )
