"""Base repository: generic CRUD shared by the RBAC repositories."""

from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from sqlalchemy import delete as sa_delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import DuplicateAssignmentException
from app.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_entity, create, update, delete and bulk helpers.

    Public read methods of subclasses return application DTOs; the ORM-level
    helpers here are for use inside repositories only.
    """

    # Set by subclasses whose table carries a unique association constraint.
    duplicate_assignment_type: str | None = None

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_entity(self, entity_id: str) -> ModelType | None:
        """Return a single ORM record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def get_entities(self, entity_ids: Iterable[str]) -> list[ModelType]:
        ids = list(set(entity_ids))
        if not ids:
            return []
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id.in_(ids)))
        return list(result.scalars().all())

    async def create(self, obj: ModelType, **duplicate_details: Any) -> ModelType:
        """Persist a new record.

        Raises:
            DuplicateAssignmentException: If a unique association already exists
                (only for repositories that set duplicate_assignment_type).
        """
        try:
            async with self.db.begin_nested():
                self.db.add(obj)
                await self.db.flush()
        except IntegrityError:
            if self.duplicate_assignment_type is None:
                raise
            raise DuplicateAssignmentException(
                f"{self.duplicate_assignment_type} already exists",
                assignment_type=self.duplicate_assignment_type,
                details_extra=dict(duplicate_details),
            ) from None
        await self.db.refresh(obj)
        return obj

    async def update(self, obj: ModelType, changes: dict[str, Any]) -> ModelType:
        """Apply column changes to an attached record and flush."""
        for key, value in changes.items():
            setattr(obj, key, value)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete_entity(self, obj: ModelType) -> None:
        await self.db.delete(obj)
        await self.db.flush()

    async def _delete_where(self, *criteria: Any) -> int:
        """Bulk delete rows matching criteria; return count."""
        result = await self.db.execute(sa_delete(self.model).where(*criteria))
        await self.db.flush()
        return result.rowcount or 0

    async def _count_where(self, *criteria: Any) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(self.model).where(*criteria)
        )
        return int(result.scalar_one())
