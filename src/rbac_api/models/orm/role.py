"""Role ORM model."""

from typing import TYPE_CHECKING

from sqlalchemy import Index, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rbac_api.models.orm.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from rbac_api.models.orm.permission import PermissionORM


class RoleORM(Base, UUIDMixin, TimestampMixin):
    """Role database model."""

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    # Relationships
    permissions: Mapped[list["PermissionORM"]] = relationship(
        "PermissionORM",
        secondary="role_permissions",
        back_populates="roles",
        viewonly=True,
    )


# Names are unique regardless of case
Index("idx_roles_name_lower", func.lower(RoleORM.name), unique=True)
