"""Centralized dependency injection factories for FastAPI.

Per-process collaborators (cache, context manager, text provider) are built
once in the application lifespan and read from ``app.state``; services are
built per request around the request's database session.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.config import Settings, get_settings
from rbac_api.database import get_db
from rbac_api.providers.base import TextGenerationProvider
from rbac_api.services.ai_service import AIService
from rbac_api.services.association_service import AssociationService
from rbac_api.services.cache_service import CacheService
from rbac_api.services.context_service import RbacContextManager
from rbac_api.services.dashboard_service import DashboardService
from rbac_api.services.permission_service import PermissionService
from rbac_api.services.role_service import RoleService


# =============================================================================
# Per-process Collaborators
# =============================================================================


def get_cache_service(request: Request) -> CacheService | None:
    """Get the shared cache, or None when Redis is not configured."""
    return getattr(request.app.state, "cache", None)


def get_context_manager(request: Request) -> RbacContextManager:
    """Get the shared RBAC context manager."""
    return request.app.state.context_manager


def get_text_provider(request: Request) -> TextGenerationProvider:
    """Get the shared text generation provider."""
    return request.app.state.text_provider


# =============================================================================
# RBAC Service Factories
# =============================================================================


def get_permission_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService | None = Depends(get_cache_service),
) -> PermissionService:
    """Get PermissionService instance."""
    return PermissionService(db, cache)


def get_role_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService | None = Depends(get_cache_service),
) -> RoleService:
    """Get RoleService instance."""
    return RoleService(db, cache)


def get_association_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService | None = Depends(get_cache_service),
) -> AssociationService:
    """Get AssociationService instance."""
    return AssociationService(db, cache)


def get_dashboard_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService | None = Depends(get_cache_service),
) -> DashboardService:
    """Get DashboardService instance."""
    return DashboardService(db, cache)


# =============================================================================
# Natural-language Command Factories
# =============================================================================


def get_ai_service(
    db: AsyncSession = Depends(get_db),
    provider: TextGenerationProvider = Depends(get_text_provider),
    context_manager: RbacContextManager = Depends(get_context_manager),
    settings: Settings = Depends(get_settings),
    cache: CacheService | None = Depends(get_cache_service),
) -> AIService:
    """Get AIService instance."""
    return AIService(db, provider, context_manager, settings, cache)
