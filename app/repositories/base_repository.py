from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DatabaseError
from app.utils.logging import get_logger

# Define a generic type for SQLAlchemy models
ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Base repository implementing common CRUD operations.

    Every write commits immediately. Fan-out categories are independent, so a
    failed batch is rolled back on its own without touching earlier batches.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session
            model: The SQLAlchemy model class this repository manages
        """
        self.session = session
        self.model = model
        self.logger = LOGGER

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """Get a record by its ID.

        Args:
            id: The UUID of the record

        Returns:
            The record if found, None otherwise
        """
        try:
            query = select(self.model).where(self.model.id == id)
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error retrieving {self.model.__name__} by ID {id}: {str(e)}",
                exc_info=True,
            )
            raise DatabaseError(f"Failed to load {self.model.__name__}", original_error=e)

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 200,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Any] = None,
    ) -> List[ModelType]:
        """Get all records with optional pagination, filtering and ordering.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            filters: Dictionary of field_name: value to filter by
            order_by: Column expression to order by

        Returns:
            List of records
        """
        try:
            query = select(self.model)

            if filters:
                for field, value in filters.items():
                    if hasattr(self.model, field):
                        query = query.where(getattr(self.model, field) == value)

            if order_by is not None:
                query = query.order_by(order_by)

            query = query.offset(skip).limit(limit)
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error retrieving all {self.model.__name__}: {str(e)}",
                exc_info=True,
            )
            raise DatabaseError(f"Failed to list {self.model.__name__}", original_error=e)

    async def create(self, **kwargs) -> ModelType:
        """Create a new record.

        Args:
            **kwargs: Fields and values for the new record

        Returns:
            The created record
        """
        try:
            instance = self.model(**kwargs)
            self.session.add(instance)
            await self.session.flush()
            await self.session.commit()
            return instance
        except SQLAlchemyError as e:
            await self.session.rollback()
            self.logger.error(
                f"Error creating {self.model.__name__}: {str(e)}",
                exc_info=True,
            )
            raise DatabaseError(f"Failed to create {self.model.__name__}", original_error=e)

    async def bulk_create(self, rows: List[Dict[str, Any]]) -> List[UUID]:
        """Insert many rows in one statement.

        Args:
            rows: Column dictionaries, one per row

        Returns:
            Generated ids in the same order as ``rows``

        Raises:
            DatabaseError: If the batch insert fails (nothing from the batch is kept)
        """
        if not rows:
            return []

        try:
            stmt = insert(self.model).returning(self.model.id, sort_by_parameter_order=True)
            result = await self.session.execute(stmt, rows)
            ids = list(result.scalars().all())
            await self.session.commit()
            return ids
        except SQLAlchemyError as e:
            await self.session.rollback()
            self.logger.error(
                f"Error bulk inserting {len(rows)} {self.model.__name__} rows: {str(e)}",
                exc_info=True,
            )
            raise DatabaseError(
                f"Failed to insert {self.model.__tablename__}: {str(e)}", original_error=e
            )

    async def delete(self, id: UUID) -> bool:
        """Delete a record by ID.

        Args:
            id: The UUID of the record to delete

        Returns:
            True if deleted, False if not found
        """
        try:
            instance = await self.get_by_id(id)
            if not instance:
                return False

            await self.session.delete(instance)
            await self.session.flush()
            await self.session.commit()
            return True
        except SQLAlchemyError as e:
            await self.session.rollback()
            self.logger.error(
                f"Error deleting {self.model.__name__} {id}: {str(e)}",
                exc_info=True,
            )
            raise DatabaseError(f"Failed to delete {self.model.__name__}", original_error=e)
