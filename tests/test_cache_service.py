"""Dashboard caching and invalidation, against an in-memory stand-in for Redis."""

import fnmatch
import json

import pytest
import redis.asyncio as redis
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.models.domain.command import CreatePermissionCommand
from rbac_api.models.dto.permission import PermissionCreate
from rbac_api.models.dto.role import RoleCreate
from rbac_api.repositories.permission_repository import PermissionRepository
from rbac_api.services.cache_service import DASHBOARD_STATS_KEY, CacheService
from rbac_api.services.command_executor import CommandExecutor
from rbac_api.services.context_service import RbacContextManager
from rbac_api.services.dashboard_service import DashboardService
from rbac_api.services.permission_service import PermissionService
from rbac_api.services.role_service import RoleService


class MemoryRedis:
    """The subset of ``redis.asyncio.Redis`` the cache uses."""

    def __init__(self, fail: bool = False) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.fail = fail

    def _check(self) -> None:
        if self.fail:
            raise redis.ConnectionError("connection refused")

    async def get(self, key: str) -> str | None:
        self._check()
        return self.data.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self._check()
        self.data[key] = value
        self.ttls[key] = ttl

    async def scan_iter(self, match: str):
        self._check()
        for key in list(self.data):
            if fnmatch.fnmatch(key, match):
                yield key

    async def delete(self, *keys: str) -> int:
        self._check()
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    async def aclose(self) -> None:
        pass


def make_cache(client: MemoryRedis) -> CacheService:
    cache = CacheService("redis://localhost:6379/0", dashboard_ttl=120)
    cache._client = client
    return cache


class TestCacheService:
    async def test_disconnected_cache_is_a_no_op(self) -> None:
        cache = CacheService("redis://localhost:6379/0")

        assert not cache.is_connected
        assert await cache.get_dashboard_stats() is None
        assert await cache.invalidate_dashboard() == 0

    async def test_stats_stored_with_ttl(self, session: AsyncSession) -> None:
        client = MemoryRedis()
        stats = await DashboardService(session).get_stats()

        assert await make_cache(client).set_dashboard_stats(stats)

        assert client.ttls[DASHBOARD_STATS_KEY] == 120
        assert json.loads(client.data[DASHBOARD_STATS_KEY])["total_roles"] == 0

    async def test_redis_errors_degrade_to_misses(self, session: AsyncSession) -> None:
        cache = make_cache(MemoryRedis(fail=True))
        stats = await DashboardService(session).get_stats()

        assert await cache.get_dashboard_stats() is None
        assert await cache.set_dashboard_stats(stats) is False
        assert await cache.invalidate_dashboard() == 0

    async def test_corrupt_entry_is_a_miss(self) -> None:
        client = MemoryRedis()
        client.data[DASHBOARD_STATS_KEY] = "{not json"

        assert await make_cache(client).get_dashboard_stats() is None


class TestDashboardCaching:
    async def test_second_read_is_served_from_cache(self, session: AsyncSession) -> None:
        cache = make_cache(MemoryRedis())
        service = DashboardService(session, cache)

        first = await service.get_stats()
        # Written behind the service's back, so only a fresh query would see it
        await PermissionRepository(session).create(name="read_users")
        second = await service.get_stats()

        assert first.total_permissions == second.total_permissions == 0

    async def test_mutation_invalidates_cached_stats(self, session: AsyncSession) -> None:
        client = MemoryRedis()
        cache = make_cache(client)
        await DashboardService(session, cache).get_stats()
        assert DASHBOARD_STATS_KEY in client.data

        await PermissionService(session, cache).create_permission(
            PermissionCreate(name="read_users")
        )

        assert DASHBOARD_STATS_KEY not in client.data
        stats = await DashboardService(session, cache).get_stats()
        assert stats.total_permissions == 1


class TestInvalidationOrder:
    """Caches are cleared only after the change is committed."""

    async def test_dashboard_cleared_after_commit(
        self, session: AsyncSession, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        events: list[str] = []
        cache = make_cache(MemoryRedis())
        event.listen(session.sync_session, "after_commit", lambda _: events.append("commit"))

        async def recording_invalidate() -> int:
            events.append("invalidate")
            return 0

        monkeypatch.setattr(cache, "invalidate_dashboard", recording_invalidate)

        role = await RoleService(session, cache).create_role(RoleCreate(name="admin"))
        await RoleService(session, cache).delete_role(role.id)

        assert events == ["commit", "invalidate", "commit", "invalidate"]

    async def test_command_context_cleared_after_commit(
        self,
        session: AsyncSession,
        context_manager: RbacContextManager,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        events: list[str] = []
        event.listen(session.sync_session, "after_commit", lambda _: events.append("commit"))

        monkeypatch.setattr(context_manager, "invalidate", lambda: events.append("invalidate"))

        result = await CommandExecutor(session, context_manager=context_manager).execute(
            CreatePermissionCommand(name="read_users")
        )

        assert result.success
        assert events == ["commit", "invalidate"]
