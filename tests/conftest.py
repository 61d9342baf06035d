"""Test config and shared fixtures."""
import pytest
from typing import AsyncGenerator, Generator, List
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from repokit.database.session import AsyncSQLModelSession, SQLModelSession
from tests.models import Hero, Team


# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_SYNC_DATABASE_URL = "sqlite://"
TEST_DB_NAME = "test_db"


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async test engine with the schema in place."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def async_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create async test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def data_session(async_session: AsyncSession) -> AsyncSQLModelSession:
    """Storage session adapter over the async test session."""
    return AsyncSQLModelSession(async_session, name=TEST_DB_NAME)


@pytest.fixture
async def sample_heroes(session_maker) -> List[Hero]:
    """Seed one team and three heroes, committed in a session of their own."""
    team = Team(id="t1", name="Preventers", headquarters="Sharp Tower")
    heroes = [
        Hero(id="h1", name="Deadpond", secret_name="Dive Wilson", age=30, team_id="t1"),
        Hero(id="h2", name="Spider-Boy", secret_name="Pedro Parqueador", age=16, team_id="t1"),
        Hero(id="h3", name="Rusty-Man", secret_name="Tommy Sharp", age=48),
    ]
    async with session_maker() as session:
        session.add(team)
        session.add_all(heroes)
        await session.commit()
    return heroes


@pytest.fixture
def sync_session() -> Generator[Session, None, None]:
    """Create blocking test database session."""
    engine = create_engine(
        TEST_SYNC_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        yield session

    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def sync_data_session(sync_session: Session) -> SQLModelSession:
    return SQLModelSession(sync_session, name="sync_test_db")


@pytest.fixture
def fake_transaction() -> AsyncMock:
    """Async transaction handle whose calls can be asserted on."""
    return AsyncMock()


@pytest.fixture
def fake_session(fake_transaction: AsyncMock) -> MagicMock:
    """Async storage session that hands out ``fake_transaction``."""
    session = MagicMock()
    session.name = "fake_db"
    session.begin_transaction = AsyncMock(return_value=fake_transaction)
    session.save_changes = AsyncMock()
    return session
