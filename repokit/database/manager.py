from contextlib import asynccontextmanager
from typing import AsyncIterator, Type
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from repokit.repository.unit_of_work import UnitOfWork
from .session import AsyncSQLModelSession

class DatabaseManager:
    """Async engine, session factory and units of work for one database."""
    _instance = None

    def __init__(self, settings, **engine_options):
        self.name = settings.DB_NAME
        self.engine = create_async_engine(
            settings.DATABASE_URL, echo=settings.DB_ECHO, future=True, **engine_options
        )
        self.session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    @classmethod
    def get_instance(cls, settings=None):
        if cls._instance is None:
            if settings is None:
                from repokit.config import settings as app_settings
                settings = app_settings
            cls._instance = cls(settings)
        return cls._instance

    async def connect(self):
        """Check connectivity (the engine manages connections)."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

    async def disconnect(self):
        await self.engine.dispose()

    async def get_session(self) -> AsyncIterator[AsyncSQLModelSession]:
        async with self.session_factory() as session:
            yield AsyncSQLModelSession(session, name=self.name)

    @asynccontextmanager
    async def unit_of_work(self, unit_of_work_class: Type[UnitOfWork] = UnitOfWork) -> AsyncIterator[UnitOfWork]:
        """Unit of work over a fresh session; the session closes when the block exits."""
        async with self.session_factory() as session:
            async with unit_of_work_class(AsyncSQLModelSession(session, name=self.name)) as uow:
                yield uow
