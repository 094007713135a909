"""Permission ORM model."""

from typing import TYPE_CHECKING

from sqlalchemy import Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rbac_api.models.orm.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from rbac_api.models.orm.role import RoleORM


class PermissionORM(Base, UUIDMixin, TimestampMixin):
    """Permission database model."""

    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    roles: Mapped[list["RoleORM"]] = relationship(
        "RoleORM",
        secondary="role_permissions",
        back_populates="permissions",
        viewonly=True,
    )


# Names are unique regardless of case
Index("idx_permissions_name_lower", func.lower(PermissionORM.name), unique=True)
