"""Base repository class for data access patterns."""

from abc import ABC
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(ABC, Generic[ModelType]):
    """Base repository providing common read/write operations.

    Repositories only flush; committing is the caller's unit of work.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]):
        self.db = db
        self.model = model

    @property
    def dialect_name(self) -> str:
        return self.db.get_bind().dialect.name

    def insert(self, table: Any = None):
        """Dialect specific INSERT supporting ``on_conflict_do_update``."""
        target = table if table is not None else self.model
        if self.dialect_name == "sqlite":
            return sqlite.insert(target)
        return postgresql.insert(target)

    async def get_by_id(self, id: Any, for_update: bool = False) -> Optional[ModelType]:
        """Get a single record by ID, optionally locking the row."""
        query = select(self.model).where(self.model.id == id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def create(self, **kwargs) -> ModelType:
        """Create a new record."""
        instance = self.model(**kwargs)
        self.db.add(instance)
        await self.db.flush()
        await self.db.refresh(instance)
        return instance
