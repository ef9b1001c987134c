"""Database configuration and session management"""

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class Database:
    """Owns the engine and session factory for one SQLite database file"""

    def __init__(self, database_url: str):
        if database_url.startswith("sqlite:///"):
            database_url = database_url.replace("sqlite:///", "sqlite+aiosqlite:///")

        self.url = database_url
        self.engine = create_async_engine(
            database_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False} if "sqlite" in database_url else {},
        )
        self.session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    def session(self) -> AsyncSession:
        """Open a new session"""
        return self.session_factory()

    async def init(self):
        """
        Initialize database (create tables)
        Safe to call multiple times - only creates tables that don't exist
        """
        # Import all models to ensure they're registered with Base.metadata
        from .models import Setting, Template, TestPlan, TicketCacheEntry  # noqa: F401

        async with self.engine.begin() as conn:

            def create_tables(connection):
                # checkfirst=True makes create_all skip existing tables
                Base.metadata.create_all(connection, checkfirst=True)

            await conn.run_sync(create_tables)

    async def dispose(self):
        await self.engine.dispose()


async def get_db(request: Request):
    """Dependency to get async database session"""
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
