"""
Base repository implementation.

Repositories open one short session per operation from a session factory,
so a single repository instance can be shared across the threads of a due
pass. SQLAlchemy failures are translated into repository exceptions.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from app.domain.shared.exceptions import DomainError, ErrorType


class RepositoryException(DomainError):
    """Base exception for repository layer errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorType.REPOSITORY)


class EntityAlreadyExistsError(RepositoryException):
    """Raised when attempting to create an entity that already exists."""

    pass


class DatabaseError(RepositoryException):
    """Raised when a database operation fails."""

    pass


class BaseRepository:
    """Shared session handling for SQLModel repositories."""

    def __init__(self, session_factory: Callable[[], Session]):
        """
        Initialize repository with a session factory.

        Args:
            session_factory: Zero-argument callable returning a new Session
        """
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        """
        Yield a session, rolling back and wrapping database errors.

        Raises:
            EntityAlreadyExistsError: On integrity violations
            DatabaseError: On any other SQLAlchemy failure
        """
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            session.rollback()
            raise EntityAlreadyExistsError(
                f"Integrity error during {operation}: {str(e)}"
            ) from e
        except SQLAlchemyError as e:
            session.rollback()
            raise DatabaseError(f"Database error during {operation}: {str(e)}") from e
        finally:
            session.close()
