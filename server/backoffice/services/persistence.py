"""Persistence gateway: transaction primitives and result-typed mutations."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..core.database import Base
from ..core.observability import get_logger

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=Base)


class WriteFailure(str, Enum):
    """Why a write did not apply."""
    NO_ROWS_MATCHED = "no_rows_matched"
    CONSTRAINT_VIOLATION = "constraint_violation"
    CONNECTION_ERROR = "connection_error"
    DATABASE_ERROR = "database_error"


@dataclass(frozen=True)
class WriteResult(Generic[RecordT]):
    """Outcome of a single mutation: the written record or a failure reason."""

    record: Optional[RecordT] = None
    failure: Optional[WriteFailure] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, record: RecordT) -> "WriteResult[RecordT]":
        return cls(record=record)

    @classmethod
    def failed(cls, failure: WriteFailure, error: Optional[str] = None) -> "WriteResult[RecordT]":
        return cls(failure=failure, error=error)


def _classify(exc: Exception) -> WriteFailure:
    if isinstance(exc, StaleDataError):
        return WriteFailure.NO_ROWS_MATCHED
    if isinstance(exc, IntegrityError):
        return WriteFailure.CONSTRAINT_VIOLATION
    if isinstance(exc, (OperationalError, InterfaceError)):
        return WriteFailure.CONNECTION_ERROR
    return WriteFailure.DATABASE_ERROR


class PersistenceGateway:
    """
    Unit-of-work boundary over one request's ``AsyncSession``.

    Outside an explicit transaction every mutation commits on its own.
    Between ``begin_transaction`` and ``commit_transaction`` /
    ``rollback_transaction`` mutations are only flushed, so the whole unit is
    committed or discarded together.

    Mutations and ``commit_transaction`` never raise for database errors;
    they return a ``WriteResult`` whose ``failure`` says what went wrong.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self._in_transaction = False

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    async def begin_transaction(self) -> None:
        # The session autobegins on its first statement. Lookups done before
        # the unit started are reads, so an already open transaction is
        # adopted as the unit.
        self._in_transaction = True

    async def commit_transaction(self) -> WriteResult:
        """
        Commit the unit.

        A failed commit leaves nothing behind: the session is reset here, so
        the unit must not be rolled back again by the caller.
        """
        try:
            await self.db.commit()
        except (StaleDataError, DBAPIError) as e:
            failure = _classify(e)
            logger.warning("Database commit failed", failure=failure.value, error=str(e))
            await self.db.rollback()
            return WriteResult.failed(failure, str(e))
        finally:
            self._in_transaction = False
        return WriteResult()

    async def rollback_transaction(self) -> None:
        try:
            await self.db.rollback()
        finally:
            self._in_transaction = False

    async def create(self, model: type[RecordT], fields: dict[str, Any]) -> WriteResult[RecordT]:
        record = model(**fields)
        self.db.add(record)
        return await self._write("create", record)

    async def update(self, record: RecordT, fields: dict[str, Any]) -> WriteResult[RecordT]:
        for key, value in fields.items():
            setattr(record, key, value)
        return await self._write("update", record)

    async def soft_delete(self, record: RecordT, at: Optional[datetime] = None) -> WriteResult[RecordT]:
        """Set the tombstone timestamp."""
        record.deleted_at = at or datetime.now(timezone.utc)
        return await self._write("soft_delete", record)

    async def restore(self, record: RecordT) -> WriteResult[RecordT]:
        """Clear the tombstone timestamp."""
        record.deleted_at = None
        return await self._write("restore", record)

    async def delete(self, record: RecordT) -> WriteResult[RecordT]:
        """Permanently remove the row."""
        await self.db.delete(record)
        return await self._write("delete", record)

    async def _write(self, operation: str, record: RecordT) -> WriteResult[RecordT]:
        table = record.__tablename__
        try:
            if self._in_transaction:
                await self.db.flush()
            else:
                await self.db.commit()
        except (StaleDataError, DBAPIError) as e:
            failure = _classify(e)
            logger.warning(
                "Database write failed",
                operation=operation,
                table=table,
                failure=failure.value,
                error=str(e),
            )
            # Inside a unit the runner's rollback discards the pending state
            if not self._in_transaction:
                await self.db.rollback()
            return WriteResult.failed(failure, str(e))

        return WriteResult.success(record)
