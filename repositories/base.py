from abc import ABC
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import object_session

from core.database import Base
from core.exceptions import ConflictError

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(ABC, Generic[ModelType]):
    """
    Base repository implementing common CRUD operations.

    Unique-constraint violations surface as ConflictError so that the
    database remains the final arbiter under concurrent writes. Lifecycle
    hooks let subclasses (see AuditableRepository) react to writes.
    """

    conflict_message = "Record already exists"
    in_use_message = "Record is still referenced by other records"

    def __init__(self, db: AsyncSession, model: type[ModelType]):
        self.db = db
        self.model = model

    async def get_by_id(self, id: str) -> ModelType | None:
        """Get a single record by ID"""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == id))
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        self.db.add(obj)
        await self._flush()
        await self.db.refresh(obj)
        await self._on_after_create(obj)
        return obj

    async def update(self, obj: ModelType) -> ModelType:
        """Flush pending changes; detached objects are merged back first."""
        if object_session(obj) is None:
            obj = await self.db.merge(obj)
        await self._flush()
        await self.db.refresh(obj)
        await self._on_after_update(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        await self._on_before_delete(obj)
        await self.db.delete(obj)
        await self._flush(self.in_use_message)

    async def _flush(self, message: str | None = None) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise ConflictError(message or self.conflict_message) from e

    # Lifecycle hooks - override in subclasses
    async def _on_after_create(self, obj: ModelType) -> None:
        """Hook called after creating a record."""
        pass

    async def _on_after_update(self, obj: ModelType) -> None:
        """Hook called after updating a record."""
        pass

    async def _on_before_delete(self, obj: ModelType) -> None:
        """Hook called before deleting a record."""
        pass
