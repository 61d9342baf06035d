"""
SQLModel-backed storage sessions.

``SQLModelSession`` wraps a blocking ``sqlmodel.Session``; ``AsyncSQLModelSession`` wraps
``sqlmodel.ext.asyncio.session.AsyncSession``. Both compile expression trees through
``ClauseCompiler`` and eager-load includes with ``selectinload``.
"""

import asyncio
from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar

import sqlalchemy as sa
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select
from sqlmodel.ext.asyncio.session import AsyncSession

from repokit.expressions.compiler import ClauseCompiler, CompiledProjection, resolve_relationship
from .base import AsyncDataSession, AsyncTransaction, Query, SyncDataSession, Transaction

T = TypeVar("T")


class SQLModelQuery(Query[T]):
    """Immutable query; executes through the owning session adapter."""

    def __init__(
        self,
        session: "_SessionAdapter",
        model: Type[T],
        predicates: Tuple[Any, ...] = (),
        includes: Tuple[Any, ...] = (),
        projection: Optional[CompiledProjection] = None,
    ):
        self._session = session
        self.model = model
        self._predicates = predicates
        self._includes = includes
        self._projection = projection

    def _copy(self, **changes: Any) -> "SQLModelQuery":
        values = {
            "predicates": self._predicates,
            "includes": self._includes,
            "projection": self._projection,
        }
        values.update(changes)
        return SQLModelQuery(self._session, self.model, **values)

    def where(self, predicate: Any) -> "SQLModelQuery[T]":
        clause = ClauseCompiler(self.model).predicate(predicate)
        return self._copy(predicates=self._predicates + (clause,))

    def include(self, path: str) -> "SQLModelQuery[T]":
        relationship = resolve_relationship(self.model, path)
        return self._copy(includes=self._includes + (relationship,))

    def select(self, projection: Any) -> "SQLModelQuery[Any]":
        return self._copy(projection=ClauseCompiler(self.model).projection(projection))

    def statement(self) -> Any:
        """SELECT for the rows this query returns."""
        if self._projection is None:
            statement = select(self.model)
            # eager loading only applies to whole entities
            if self._includes:
                statement = statement.options(*[selectinload(relationship) for relationship in self._includes])
        elif self._projection.scalar:
            statement = select(self._projection.columns[0][1]).select_from(self.model)
        else:
            statement = sa.select(*[column for _, column in self._projection.columns]).select_from(self.model)
        return statement.where(*self._predicates)

    def _shape(self, rows: List[Any]) -> List[Any]:
        if self._projection is None or self._projection.scalar:
            return rows
        return [self._projection.shape(row) for row in rows]

    async def any(self) -> bool:
        statement = sa.select(sa.literal(True)).select_from(self.model).where(*self._predicates).limit(1)
        row = await self._session._exec(statement, lambda result: result.first())
        return row is not None

    async def count(self) -> int:
        statement = sa.select(sa.func.count()).select_from(self.model).where(*self._predicates)
        return await self._session._exec(statement, lambda result: result.scalar_one())

    async def to_list(self) -> List[Any]:
        rows = await self._session._exec(self.statement(), lambda result: list(result.all()))
        return self._shape(rows)

    async def first(self) -> Optional[Any]:
        row = await self._session._exec(self.statement().limit(1), lambda result: result.first())
        if row is None:
            return None
        return self._shape([row])[0]


class SQLModelTransaction(Transaction):
    def __init__(self, owner: "SQLModelSession", transaction: Any):
        self._owner = owner
        self._transaction = transaction

    def commit(self) -> None:
        self._transaction.commit()

    def rollback(self) -> None:
        self._transaction.rollback()

    def close(self) -> None:
        self._owner._release(self)
        if self._owner.session.get_transaction() is self._transaction:
            self._transaction.rollback()


class AsyncSQLModelTransaction(AsyncTransaction):
    def __init__(self, owner: "AsyncSQLModelSession", transaction: Any):
        self._owner = owner
        self._transaction = transaction
        self._sync_transaction = owner.session.sync_session.get_transaction()

    async def commit(self) -> None:
        await self._transaction.commit()

    async def rollback(self) -> None:
        await self._transaction.rollback()

    async def close(self) -> None:
        self._owner._release(self)
        if self._owner.session.sync_session.get_transaction() is self._sync_transaction:
            await self._transaction.rollback()


class _SessionAdapter:
    """Staging and querying shared by the blocking and async adapters."""

    def __init__(self, session: Any, name: Optional[str] = None):
        self.session = session
        self._name = name or type(session).__name__
        self._transaction: Optional[Any] = None

    @property
    def name(self) -> str:
        return self._name

    def query(self, model: Type[T]) -> SQLModelQuery[T]:
        return SQLModelQuery(self, model)

    def add(self, entity: Any) -> None:
        self.session.add(entity)

    def update(self, entity: Any) -> None:
        """Attach ``entity``; the session tracks its changes from here on."""
        self.session.add(entity)

    def _release(self, transaction: Any) -> None:
        if self._transaction is transaction:
            self._transaction = None

    async def _exec(self, statement: Any, consume: Callable[[Any], Any]) -> Any:
        raise NotImplementedError


class SQLModelSession(_SessionAdapter, SyncDataSession):
    """Adapter over a blocking SQLModel ``Session``; reads and deletes run in a worker thread."""

    session: Session

    def __init__(self, session: Session, name: Optional[str] = None):
        super().__init__(session, name)

    async def _exec(self, statement: Any, consume: Callable[[Any], Any]) -> Any:
        # run and consume on the same thread as the cursor
        return await asyncio.to_thread(lambda: consume(self.session.exec(statement)))

    async def find(self, model: Type[T], id: Any) -> Optional[T]:
        return await asyncio.to_thread(self.session.get, model, id)

    async def remove(self, entity: Any) -> None:
        await asyncio.to_thread(self.session.delete, entity)

    def save_changes(self) -> None:
        """Flush inside an explicit transaction, otherwise commit."""
        if self._transaction is not None:
            self.session.flush()
        else:
            self.session.commit()

    def begin_transaction(self) -> SQLModelTransaction:
        if self.session.in_transaction():
            # adopt the transaction the session auto-began
            transaction = self.session.get_transaction()
        else:
            transaction = self.session.begin()
        self._transaction = SQLModelTransaction(self, transaction)
        return self._transaction


class AsyncSQLModelSession(_SessionAdapter, AsyncDataSession):
    """Adapter over a SQLModel ``AsyncSession``."""

    session: AsyncSession

    def __init__(self, session: AsyncSession, name: Optional[str] = None):
        super().__init__(session, name)

    async def _exec(self, statement: Any, consume: Callable[[Any], Any]) -> Any:
        return consume(await self.session.exec(statement))

    async def find(self, model: Type[T], id: Any) -> Optional[T]:
        return await self.session.get(model, id)

    async def remove(self, entity: Any) -> None:
        await self.session.delete(entity)

    async def save_changes(self) -> None:
        """Flush inside an explicit transaction, otherwise commit."""
        if self._transaction is not None:
            await self.session.flush()
        else:
            await self.session.commit()

    async def begin_transaction(self) -> AsyncSQLModelTransaction:
        if self.session.in_transaction():
            # adopt the transaction the session auto-began
            transaction = self.session.get_transaction()
        else:
            transaction = await self.session.begin()
        self._transaction = AsyncSQLModelTransaction(self, transaction)
        return self._transaction
