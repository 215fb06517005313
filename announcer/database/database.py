from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from announcer.config import Config
from announcer.database.models import Base
from announcer.utils.exceptions import StorageError
from announcer.utils.logger import setup_logger

class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url
        self.engine = None
        self.async_session = None

    @staticmethod
    def to_async_url(database_url: str) -> str:
        """Convert a plain sqlite URL to its aiosqlite form"""
        if database_url.startswith('sqlite:///'):
            return database_url.replace('sqlite:///', 'sqlite+aiosqlite:///', 1)
        return database_url

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        database_url = self.to_async_url(self.database_url or Config.DATABASE_URL)

        try:
            self.engine = create_async_engine(
                database_url,
                echo=Config.DEBUG,
                future=True
            )

            self.async_session = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )

            # Create all tables
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            self.logger.error(f"Failed to initialize database: {e}")
            raise StorageError("initialize", str(e)) from e

        self.logger.info("Database initialized successfully")

    @property
    def session_factory(self):
        return self.async_session

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")
