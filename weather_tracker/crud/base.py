"""
Generic CRUD helpers shared by model-specific CRUD classes.
"""

from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from weather_tracker.database import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Primary-key lookup and deletion for one mapped model."""

    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: Any, *, fresh: bool = False) -> Optional[ModelType]:
        """
        Load a row by primary key.

        With ``fresh=True`` the row is re-read from the database even when
        the session already holds it, so a read-modify-write starts from the
        committed state.
        """
        query = select(self.model).where(self.model.id == id)
        if fresh:
            query = query.execution_options(populate_existing=True)
        return (await db.execute(query)).scalars().first()

    async def remove(self, db: AsyncSession, *, id: Any) -> Optional[ModelType]:
        """Delete a row by primary key; returns the deleted instance, or None if absent."""
        db_obj = await self.get(db, id)
        if db_obj is None:
            return None

        await db.delete(db_obj)
        await db.commit()
        return db_obj
