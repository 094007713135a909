"""Base repository with common database operations."""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.models.orm.base import Base
from rbac_api.utils.validation import escape_like_wildcards

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """CRUD operations shared by named entities (permissions and roles)."""

    model: type[T]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, id: UUID) -> T | None:
        """Get a record by ID.

        Args:
            id: Record UUID

        Returns:
            Record or None if not found
        """
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> T | None:
        """Get a record by name, ignoring case.

        Args:
            name: Entity name

        Returns:
            Record or None if not found
        """
        result = await self.session.execute(
            select(self.model).where(func.lower(self.model.name) == name.lower()).limit(1)
        )
        return result.scalar_one_or_none()

    async def name_taken(self, name: str, exclude_id: UUID | None = None) -> bool:
        """Check whether another record already uses ``name`` (case-insensitive).

        Args:
            name: Candidate name
            exclude_id: Record to ignore, used when renaming

        Returns:
            True if the name is in use
        """
        query = select(self.model.id).where(func.lower(self.model.name) == name.lower())
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.first() is not None

    def _search_filter(self, search: str) -> Any:
        pattern = f"%{escape_like_wildcards(search)}%"
        return self.model.name.ilike(pattern, escape="\\")

    async def get_all(
        self,
        search: str | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[T], int]:
        """Get records ordered by name with optional substring search.

        Args:
            search: Optional case-insensitive substring filter
            offset: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (records, total matching count)
        """
        query = select(self.model)
        count_query = select(func.count()).select_from(self.model)
        if search:
            condition = self._search_filter(search)
            query = query.where(condition)
            count_query = count_query.where(condition)

        total = (await self.session.execute(count_query)).scalar_one()
        result = await self.session.execute(
            query.order_by(self.model.name).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total

    async def list_all(self) -> list[T]:
        """Get every record ordered by name."""
        result = await self.session.execute(select(self.model).order_by(self.model.name))
        return list(result.scalars().all())

    async def get_recent(self, limit: int = 5) -> list[T]:
        """Get the most recently created records, newest first."""
        result = await self.session.execute(
            select(self.model).order_by(self.model.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        """Count total records.

        Returns:
            Total count
        """
        result = await self.session.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()

    async def create(self, **kwargs: Any) -> T:
        """Create a new record.

        Args:
            **kwargs: Field values

        Returns:
            Created record
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update(self, instance: T, **kwargs: Any) -> T:
        """Apply field changes to a loaded record.

        Args:
            instance: Record to change
            **kwargs: Fields to update

        Returns:
            Updated record
        """
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)

        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, instance: T) -> None:
        """Delete a loaded record.

        Args:
            instance: Record to delete
        """
        await self.session.delete(instance)
        await self.session.flush()
