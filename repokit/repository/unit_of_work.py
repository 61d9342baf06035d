"""
Unit of Work: owns one storage session, its transaction and the repositories sharing it.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, Type, TypeVar, Union

from repokit.database.base import AsyncDataSession, DataSession, SyncDataSession
from repokit.exceptions import NoActiveTransactionError, TransactionConflictError
from repokit.logging import get_logger
from .base import Repository

S = TypeVar("S", bound=DataSession)
AS = TypeVar("AS", bound=AsyncDataSession)
SS = TypeVar("SS", bound=SyncDataSession)
T = TypeVar("T")

logger = get_logger("unit_of_work")


@dataclass(frozen=True)
class Idle:
    """No transaction open."""


@dataclass(frozen=True)
class Active:
    """A transaction is open and not yet resolved."""
    transaction: Any


TransactionState = Union[Idle, Active]

IDLE = Idle()


class BaseUnitOfWork(Generic[S]):
    """Transaction state and repository creation shared by the async and blocking flavours."""

    def __init__(self, session: Optional[S] = None):
        if session is None:
            raise ValueError("Session must be provided.")

        self.session = session
        self._state: TransactionState = IDLE
        self._database_name = session.name

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return isinstance(self._state, Active)

    def get_repository(self, model: Type[T], repository_class: Type[Repository] = Repository) -> Repository[T]:
        """Create a repository bound to this unit of work's session."""
        return repository_class(self.session, model)

    def _ensure_idle(self) -> None:
        if isinstance(self._state, Active):
            raise TransactionConflictError(self._database_name)

    def _require_active(self) -> Any:
        if not isinstance(self._state, Active):
            raise NoActiveTransactionError(self._database_name)
        return self._state.transaction

    def _detach(self) -> Optional[Any]:
        """Return to Idle, handing back the transaction that was held."""
        state, self._state = self._state, IDLE
        return state.transaction if isinstance(state, Active) else None


class UnitOfWork(BaseUnitOfWork[AS]):
    """
    Manages related repositories with a shared session and explicit transactions.

    Usage:
        async with UnitOfWork(AsyncSQLModelSession(session)) as uow:
            heroes = uow.get_repository(Hero)
            await uow.begin_transaction()
            await heroes.insert(Hero(id="h1", name="Deadpond"))
            await uow.commit()

    Leaving the block releases a transaction that was neither committed nor rolled back.
    """

    async def begin_transaction(self) -> None:
        self._ensure_idle()

        logger.debug(f"Starting a new transaction on database {self._database_name}")
        self._state = Active(await self.session.begin_transaction())

    async def commit(self) -> None:
        """Save staged changes and commit; the transaction is released even if this fails."""
        transaction = self._require_active()

        try:
            logger.debug(f"Committing current transaction for database {self._database_name}")
            await self.session.save_changes()
            await transaction.commit()
        finally:
            self._detach()
            await transaction.close()

    async def rollback(self) -> None:
        transaction = self._require_active()

        try:
            logger.debug(f"Rolling back current transaction for database {self._database_name}")
            await transaction.rollback()
        finally:
            self._detach()
            await transaction.close()

    async def save_changes(self) -> None:
        """Persist staged changes now, inside the active transaction if there is one."""
        await self.session.save_changes()

    async def close(self) -> None:
        """Release a transaction still held by this unit of work."""
        transaction = self._detach()
        if transaction is not None:
            logger.debug(f"Releasing unresolved transaction for database {self._database_name}")
            await transaction.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class SyncUnitOfWork(BaseUnitOfWork[SS]):
    """
    Blocking counterpart of ``UnitOfWork`` for sessions with blocking transaction primitives.

    Commit, rollback and save block the caller; repository reads on ``SQLModelSession`` run in a
    worker thread.
    """

    def begin_transaction(self) -> None:
        self._ensure_idle()

        logger.debug(f"Starting a new transaction on database {self._database_name}")
        self._state = Active(self.session.begin_transaction())

    def commit(self) -> None:
        transaction = self._require_active()

        try:
            logger.debug(f"Committing current transaction for database {self._database_name}")
            self.session.save_changes()
            transaction.commit()
        finally:
            self._detach()
            transaction.close()

    def rollback(self) -> None:
        transaction = self._require_active()

        try:
            logger.debug(f"Rolling back current transaction for database {self._database_name}")
            transaction.rollback()
        finally:
            self._detach()
            transaction.close()

    def save_changes(self) -> None:
        self.session.save_changes()

    def close(self) -> None:
        transaction = self._detach()
        if transaction is not None:
            logger.debug(f"Releasing unresolved transaction for database {self._database_name}")
            transaction.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
