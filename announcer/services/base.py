"""
Base service class for the announcer stores.

Provides async database session management and maps database failures
onto StorageError.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from announcer.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

class BaseService:
    """Base class for all services with async database session management."""

    def __init__(self, session_factory):
        """
        Initialize base service with session factory.

        Args:
            session_factory: Async session factory from Database class
        """
        self.session_factory = session_factory

    @asynccontextmanager
    async def get_session(self, operation: str = "session") -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope for async database operations.

        Commits on success, rolls back on any error. SQLAlchemy and OS
        level failures are re-raised as StorageError.
        """
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except (SQLAlchemyError, OSError) as e:
            await session.rollback()
            logger.error(f"Database error during {operation}: {e}")
            raise StorageError(operation, str(e)) from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
