"""Cached RBAC inventory snapshot for the natural-language command layer."""

import asyncio
import logging
import time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.models.domain.context import AssociationRef, PermissionRef, RbacContext, RoleRef
from rbac_api.repositories.permission_repository import PermissionRepository
from rbac_api.repositories.role_permission_repository import RolePermissionRepository
from rbac_api.repositories.role_repository import RoleRepository
from rbac_api.utils.secure_logging import log_warning

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_TTL_SECONDS = 30


class RbacContextManager:
    """Holds the latest RBAC snapshot and reloads it after a fixed TTL.

    One instance lives for the lifetime of the process. The cache only
    saves round trips; every command is re-checked against storage before
    it mutates anything.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_CONTEXT_TTL_SECONDS) -> None:
        self.ttl_seconds = ttl_seconds
        self._context: RbacContext | None = None
        self._loaded_at = 0.0
        self._lock = asyncio.Lock()

    @property
    def is_fresh(self) -> bool:
        """Whether the cached snapshot is younger than the TTL."""
        return self._context is not None and time.monotonic() - self._loaded_at < self.ttl_seconds

    def invalidate(self) -> None:
        """Force the next ``get_context`` call to reload."""
        self._loaded_at = 0.0

    async def get_context(self, session: AsyncSession) -> RbacContext:
        """Return the cached snapshot, reloading it when stale.

        Args:
            session: Database session used for a reload

        Returns:
            Current RbacContext
        """
        if self.is_fresh:
            return self._context
        return await self.refresh(session)

    async def refresh(self, session: AsyncSession) -> RbacContext:
        """Reload the snapshot from storage.

        A failed reload keeps the previous snapshot, or an empty one when
        nothing has been loaded yet.

        Args:
            session: Database session

        Returns:
            The refreshed (or retained) RbacContext
        """
        async with self._lock:
            try:
                self._context = await self._load(session)
                self._loaded_at = time.monotonic()
            except SQLAlchemyError as e:
                log_warning(logger, "Failed to refresh RBAC context", e)
                if self._context is None:
                    self._context = RbacContext()
            return self._context

    @staticmethod
    async def _load(session: AsyncSession) -> RbacContext:
        permissions = await PermissionRepository(session).list_all()
        roles = await RoleRepository(session).list_all()
        pairs = await RolePermissionRepository(session).list_pairs()
        return RbacContext(
            permissions=[PermissionRef.model_validate(p) for p in permissions],
            roles=[RoleRef.model_validate(r) for r in roles],
            associations=[
                AssociationRef(role_id=role_id, permission_id=permission_id)
                for role_id, permission_id in pairs
            ],
        )
