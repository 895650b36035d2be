"""Record store backed by a PostgreSQL table.

Every operation is a single parameterized statement run in its own session
and committed on its own. Driver and SQLAlchemy errors are caught here and
returned as ``PERSISTENCE_ERROR`` failures; the raw error text stays in
``Failure.cause`` for the server log and never reaches the client.
"""

from collections.abc import Callable, Mapping
from contextlib import AbstractContextManager
from typing import Any

from loguru import logger
from opentelemetry.trace import Span
from pydantic import BaseModel
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.observability import trace_operation
from src.domain.results import Result, Success, not_found, persistence_failure
from src.infrastructure.database.session import get_async_session, get_session_factory

# Connection failures from asyncpg surface as OSError, not SQLAlchemyError
STORAGE_ERRORS = (SQLAlchemyError, OSError)


class SqlRecordStore[T: BaseModel]:
    """``RecordStore`` with integer keys backed by one mapped table.

    Args:
        table_model: SQLAlchemy mapped class with an integer ``id`` column.
        record_model: Pydantic model rows are converted to.
        entity: Entity label used in messages, e.g. "User".
        session_factory_provider: Returns the session factory to use; resolved
            on each operation so the engine is only built when first needed.

    Example:
        users = SqlRecordStore(UserRecord, User, "User")
    """

    def __init__(
        self,
        table_model: type[Any],
        record_model: type[T],
        entity: str,
        session_factory_provider: Callable[
            [], async_sessionmaker[AsyncSession]
        ] = get_session_factory,
    ) -> None:
        self.table_model = table_model
        self.record_model = record_model
        self.entity = entity
        self._session_factory_provider = session_factory_provider
        logger.debug("Initialized SQL store for {}", entity)

    def _to_record(self, row: object) -> T:
        return self.record_model.model_validate(row, from_attributes=True)

    def _span(self, operation: str) -> AbstractContextManager[Span]:
        return trace_operation(
            f"{self.entity.lower()}.{operation}",
            entity=self.entity,
            backend="postgres",
        )

    async def list_all(self) -> Result[list[T]]:
        """Return every row ordered by id."""
        stmt = select(self.table_model).order_by(self.table_model.id)
        try:
            with self._span("list"):
                async with get_async_session(self._session_factory_provider()) as session:
                    rows = (await session.execute(stmt)).scalars().all()
                    records = [self._to_record(row) for row in rows]
        except STORAGE_ERRORS as exc:
            return persistence_failure("list", exc, entity=self.entity)

        logger.debug("Retrieved {} {} rows", len(records), self.entity)
        return Success(records)

    async def get(self, key: int) -> Result[T]:
        """Return the row with the given id."""
        stmt = select(self.table_model).where(self.table_model.id == key)
        try:
            with self._span("get"):
                async with get_async_session(self._session_factory_provider()) as session:
                    row = (await session.execute(stmt)).scalar_one_or_none()
                    record = self._to_record(row) if row is not None else None
        except STORAGE_ERRORS as exc:
            return persistence_failure("get", exc, entity=self.entity, key=key)

        if record is None:
            logger.debug("{} not found - ID: {}", self.entity, key)
            return not_found(self.entity, key)
        return Success(record)

    async def create(self, fields: Mapping[str, object]) -> Result[T]:
        """Insert a row; the id comes from the table's sequence."""
        stmt = insert(self.table_model).values(**fields).returning(self.table_model)
        try:
            with self._span("create"):
                async with get_async_session(self._session_factory_provider()) as session:
                    row = (await session.execute(stmt)).scalar_one()
                    key = row.id
                    record = self._to_record(row)
        except STORAGE_ERRORS as exc:
            return persistence_failure("create", exc, entity=self.entity)

        logger.info("Created {} with ID: {}", self.entity, key)
        return Success(record)

    async def update(self, key: int, fields: Mapping[str, object]) -> Result[T]:
        """Set every supplied column on the row with the given id."""
        stmt = (
            update(self.table_model)
            .where(self.table_model.id == key)
            .values(**fields)
            .returning(self.table_model)
            .execution_options(synchronize_session=False)
        )
        try:
            with self._span("update"):
                async with get_async_session(self._session_factory_provider()) as session:
                    row = (await session.execute(stmt)).scalar_one_or_none()
                    record = self._to_record(row) if row is not None else None
        except STORAGE_ERRORS as exc:
            return persistence_failure("update", exc, entity=self.entity, key=key)

        if record is None:
            logger.debug("{} not found for update - ID: {}", self.entity, key)
            return not_found(self.entity, key)

        logger.info(
            "Updated {} ID {} - fields: {}", self.entity, key, list(fields.keys())
        )
        return Success(record)

    async def delete(self, key: int) -> Result[bool]:
        """Delete the row with the given id."""
        stmt = (
            delete(self.table_model)
            .where(self.table_model.id == key)
            .returning(self.table_model.id)
        )
        try:
            with self._span("delete"):
                async with get_async_session(self._session_factory_provider()) as session:
                    deleted = (await session.execute(stmt)).scalar_one_or_none() is not None
        except STORAGE_ERRORS as exc:
            return persistence_failure("delete", exc, entity=self.entity, key=key)

        if deleted:
            logger.info("Deleted {} with ID: {}", self.entity, key)
        return Success(deleted)
