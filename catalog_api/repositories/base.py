"""
Base CRUD Repository Pattern
Generic repository with common database operations
"""

from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from pydantic import BaseModel
import structlog

from catalog_api.core.database import Base

logger = structlog.get_logger()

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Base CRUD repository with generic database operations
    """

    def __init__(self, model: Type[ModelType]):
        """
        Initialize CRUD repository

        Args:
            model: SQLAlchemy model class
        """
        self.model = model

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        for field, value in (filters or {}).items():
            query = query.where(getattr(self.model, field) == value)
        return query

    async def get(self, db: AsyncSession, id: int) -> Optional[ModelType]:
        """
        Get a single record by ID

        Args:
            db: Database session
            id: Record ID

        Returns:
            Model instance or None
        """
        result = await db.execute(select(self.model).where(self.model.id == id))
        record = result.scalar_one_or_none()

        if record:
            logger.debug("Record retrieved", model=self.model.__name__, id=id)
        else:
            logger.debug("Record not found", model=self.model.__name__, id=id)

        return record

    async def count(self, db: AsyncSession, *, filters: Optional[Dict[str, Any]] = None) -> int:
        """
        Count records with optional filtering

        Args:
            db: Database session
            filters: Dictionary of field filters

        Returns:
            Number of records
        """
        query = self._apply_filters(select(func.count(self.model.id)), filters)
        result = await db.execute(query)
        return result.scalar() or 0

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: Union[CreateSchemaType, Dict[str, Any]],
        commit: bool = True
    ) -> ModelType:
        """
        Create a new record

        Args:
            db: Database session
            obj_in: Pydantic model or dict with creation data
            commit: Whether to commit the transaction

        Returns:
            Created model instance
        """
        try:
            obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
            db_obj = self.model(**obj_in_data)

            db.add(db_obj)

            if commit:
                await db.commit()
                await db.refresh(db_obj)
            else:
                await db.flush()

            logger.info("Record created", model=self.model.__name__, id=db_obj.id)
            return db_obj

        except Exception as e:
            if commit:
                await db.rollback()
            logger.error("Error creating record", model=self.model.__name__, error=str(e))
            raise

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
        commit: bool = True
    ) -> ModelType:
        """
        Update an existing record

        Args:
            db: Database session
            db_obj: Existing model instance
            obj_in: Pydantic model or dict with update data
            commit: Whether to commit the transaction

        Returns:
            Updated model instance
        """
        try:
            if isinstance(obj_in, dict):
                update_data = obj_in
            else:
                update_data = obj_in.model_dump(exclude_unset=True)

            for field, value in update_data.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)

            if commit:
                await db.commit()
                await db.refresh(db_obj)
            else:
                await db.flush()

            logger.info("Record updated", model=self.model.__name__, id=db_obj.id)
            return db_obj

        except Exception as e:
            if commit:
                await db.rollback()
            logger.error("Error updating record", model=self.model.__name__, id=db_obj.id, error=str(e))
            raise

    async def delete(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        commit: bool = True
    ) -> None:
        """
        Hard delete a record. Dependent rows go with it via ON DELETE CASCADE.

        Args:
            db: Database session
            db_obj: Model instance to delete
            commit: Whether to commit the transaction
        """
        record_id = db_obj.id
        try:
            await db.delete(db_obj)

            if commit:
                await db.commit()
            else:
                await db.flush()

            logger.info("Record deleted", model=self.model.__name__, id=record_id)

        except Exception as e:
            if commit:
                await db.rollback()
            logger.error("Error deleting record", model=self.model.__name__, id=record_id, error=str(e))
            raise
