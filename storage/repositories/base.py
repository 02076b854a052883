"""
Base Repository Class.

============================================================
PURPOSE
============================================================
Provides common functionality for all ledger repositories:
- Session management patterns
- Error handling wrappers
- Common query operations
- Savepoint / commit helpers
- Logging setup

============================================================
USAGE
============================================================
All repositories inherit from BaseRepository. The session is
injected via the constructor; repositories flush, services
decide when to commit.

============================================================
"""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Generic, List, NoReturn, Optional, Type, TypeVar

from sqlalchemy import select, func
from sqlalchemy.exc import (
    IntegrityError as SQLAlchemyIntegrityError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session

from storage.models.base import Base
from storage.repositories.exceptions import (
    ConnectionError,
    DuplicateRecordError,
    IntegrityError,
    QueryError,
    RecordNotFoundError,
    TransactionError,
)


# Type variable for ORM model
T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    ============================================================
    RESPONSIBILITIES
    ============================================================
    - Provides common CRUD patterns
    - Wraps database errors in repository exceptions
    - Manages logging for all operations

    ============================================================
    USAGE
    ============================================================
    class AccountRepository(BaseRepository[Account]):
        def __init__(self, session: Session):
            super().__init__(session, Account, "AccountRepository")

    ============================================================
    """

    def __init__(
        self,
        session: Session,
        model_class: Type[T],
        repository_name: str
    ) -> None:
        """
        Initialize the repository.

        Args:
            session: SQLAlchemy session (injected)
            model_class: The ORM model class this repository manages
            repository_name: Name for logging and error messages
        """
        self._session = session
        self._model_class = model_class
        self._repository_name = repository_name
        self._logger = logging.getLogger(f"repository.{repository_name}")

    @property
    def session(self) -> Session:
        """Get the current session."""
        return self._session

    @property
    def repository_name(self) -> str:
        """Get the repository name."""
        return self._repository_name

    # =========================================================
    # PROTECTED HELPER METHODS
    # =========================================================

    def _handle_db_error(
        self,
        error: Exception,
        operation: str,
        context: Optional[dict] = None
    ) -> NoReturn:
        """
        Wrap a database error in a repository exception.

        Raises:
            RepositoryException: Always
        """
        context = context or {}
        self._logger.error(
            f"Database error in {operation}: {error}",
            extra={"context": context},
            exc_info=True
        )

        if isinstance(error, OperationalError):
            raise ConnectionError(
                repository_name=self._repository_name,
                operation=operation,
                original_error=str(error)
            ) from error

        if isinstance(error, SQLAlchemyIntegrityError):
            error_str = str(error).lower()
            if "duplicate" in error_str or "unique" in error_str:
                raise DuplicateRecordError(
                    repository_name=self._repository_name,
                    operation=operation,
                    message=str(error.orig)
                ) from error

            raise IntegrityError(
                repository_name=self._repository_name,
                operation=operation,
                message=str(error.orig)
            ) from error

        raise QueryError(
            repository_name=self._repository_name,
            operation=operation,
            original_error=str(error)
        ) from error

    def _add(self, entity: T) -> T:
        """Add an entity to the session and flush it."""
        try:
            self._session.add(entity)
            self._session.flush()
            self._logger.debug(f"Added entity: {entity}")
            return entity
        except SQLAlchemyError as e:
            self._handle_db_error(e, "add", {"entity": str(entity)})

    def _flush(self, operation: str) -> None:
        try:
            self._session.flush()
        except SQLAlchemyError as e:
            self._handle_db_error(e, operation)

    def _get_by_id(self, record_id: Any) -> Optional[T]:
        """Get an entity by its primary key, or None."""
        try:
            return self._session.get(self._model_class, record_id)
        except SQLAlchemyError as e:
            self._handle_db_error(e, "get_by_id", {"id": str(record_id)})

    def _get_by_id_or_raise(self, record_id: Any, id_field: str = "id") -> T:
        """
        Get an entity by its primary key, raising if not found.

        Raises:
            RecordNotFoundError: If entity does not exist
        """
        entity = self._get_by_id(record_id)
        if entity is None:
            raise RecordNotFoundError(
                repository_name=self._repository_name,
                record_id=record_id,
                id_field=id_field
            )
        return entity

    def _delete(self, entity: T) -> None:
        """Delete an entity and flush."""
        try:
            self._session.delete(entity)
            self._session.flush()
            self._logger.debug(f"Deleted entity: {entity}")
        except SQLAlchemyError as e:
            self._handle_db_error(e, "delete", {"entity": str(entity)})

    def _count(self, stmt: Any) -> int:
        """Count the rows a select statement would return."""
        try:
            count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
            return self._session.execute(count_stmt).scalar() or 0
        except SQLAlchemyError as e:
            self._handle_db_error(e, "count")

    def _execute_query(self, stmt: Any) -> List[T]:
        """Execute a select statement and return entities."""
        try:
            result = self._session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self._handle_db_error(e, "query")

    def _execute_rows(self, stmt: Any) -> List[Any]:
        """Execute a select statement and return raw rows."""
        try:
            return list(self._session.execute(stmt).all())
        except SQLAlchemyError as e:
            self._handle_db_error(e, "query_rows")

    def _execute_scalar(self, stmt: Any) -> Any:
        """Execute a select statement and return a single value or None."""
        try:
            return self._session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            self._handle_db_error(e, "query_scalar")

    # =========================================================
    # TRANSACTIONS
    # =========================================================

    @contextmanager
    def atomic(self) -> Generator[None, None, None]:
        """
        Savepoint around a unit of work.

        Rolls the unit back and re-raises on any exception.
        """
        try:
            savepoint = self._session.begin_nested()
        except SQLAlchemyError as e:
            self._handle_db_error(e, "savepoint")
        with savepoint:
            yield

    def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            TransactionError: If commit fails
        """
        try:
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise TransactionError(
                repository_name=self._repository_name,
                phase="commit",
                original_error=str(e)
            ) from e

    def rollback(self) -> None:
        """Rollback the current transaction."""
        try:
            self._session.rollback()
        except SQLAlchemyError as e:
            self._logger.error(f"Rollback failed: {e}")
            raise TransactionError(
                repository_name=self._repository_name,
                phase="rollback",
                original_error=str(e)
            ) from e
