"""
Base Repository for Cowork Sessions

Generic async repository with the CRUD operations shared by every table.
Database driver errors are translated into StoreError so callers only
handle the application's own exception hierarchy.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, TypeVar, Generic, Optional, Type
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from cowork.infrastructure.exceptions import StoreError


ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=SQLModel)


class BaseRepository(Generic[ModelType, CreateSchemaType]):
    """
    Generic async repository.

    Args:
        model: The SQLModel table class to operate on
        session: Async database session shared with the other repositories
            of the same request
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self._model = model
        self._session = session

    @property
    def session(self) -> AsyncSession:
        """Get the current session."""
        return self._session

    @property
    def table_name(self) -> str:
        return self._model.__tablename__

    @asynccontextmanager
    async def _store_operation(self, operation: str) -> AsyncIterator[None]:
        """Translate SQLAlchemy failures into StoreError."""
        try:
            yield
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to {operation} {self.table_name}",
                operation=operation,
                table=self.table_name,
                original_error=e,
            ) from e

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """
        Get a single record by its primary key.

        Returns:
            Model instance or None if not found
        """
        async with self._store_operation("read"):
            return await self._session.get(self._model, id)

    async def create(self, data: CreateSchemaType) -> ModelType:
        """
        Insert a new record.

        Args:
            data: Create schema with field values

        Returns:
            Created model instance (flushed, not yet committed)
        """
        async with self._store_operation("insert"):
            db_obj = self._model.model_validate(data)
            self._session.add(db_obj)
            await self._session.flush()
            await self._session.refresh(db_obj)
            return db_obj
