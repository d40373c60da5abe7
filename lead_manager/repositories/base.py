"""
Base repository with generic CRUD operations.
"""
import uuid
from typing import TypeVar, Generic, Type, Optional, List, Any, Iterable
from datetime import datetime

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession


ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository with CRUD operations.
    Inherit and specify the model class.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def create(self, obj_in: dict) -> ModelType:
        """Create a new record."""
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        """Get a record by ID."""
        return await self.session.get(self.model, id)

    async def get_many(self, ids: Iterable[uuid.UUID]) -> List[ModelType]:
        """Get every record whose ID is in `ids` (missing IDs are skipped)."""
        ids = list(ids)
        if not ids:
            return []
        result = await self.session.exec(select(self.model).where(self.model.id.in_(ids)))
        return list(result.all())

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """Get a record by a specific field."""
        query = select(self.model).where(getattr(self.model, field) == value)
        result = await self.session.exec(query)
        return result.first()

    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[ModelType]:
        """
        Update a record.

        Every key in obj_in is written, None included, so callers pass
        `model_dump(exclude_unset=True)` to leave untouched fields alone.
        """
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        if hasattr(db_obj, 'updated_at'):
            db_obj.updated_at = datetime.utcnow()

        self.session.add(db_obj)
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def save_all(self, objs: Iterable[ModelType]) -> None:
        """Commit changes made to already loaded records."""
        now = datetime.utcnow()
        for obj in objs:
            if hasattr(obj, 'updated_at'):
                obj.updated_at = now
            self.session.add(obj)
        await self.session.commit()
