"""
Storage session interface consumed by repositories and units of work.

Any engine that can run filtered, eager-loaded and projected queries, stage changes and
scope them in transactions can back the persistence layer by implementing these classes.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, Type, TypeVar

T = TypeVar("T")


class Query(ABC, Generic[T]):
    """Lazily built query over one entity type; builder methods return new queries."""

    @abstractmethod
    def where(self, predicate: Any) -> "Query[T]":
        pass

    @abstractmethod
    def include(self, path: str) -> "Query[T]":
        """Eager-load the named relation."""
        pass

    @abstractmethod
    def select(self, projection: Any) -> "Query[Any]":
        pass

    @abstractmethod
    async def any(self) -> bool:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass

    @abstractmethod
    async def to_list(self) -> List[T]:
        pass

    @abstractmethod
    async def first(self) -> Optional[T]:
        pass


class Transaction(ABC):
    """Blocking transaction handle."""

    @abstractmethod
    def commit(self) -> None:
        pass

    @abstractmethod
    def rollback(self) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the handle, rolling back if it is still open. Safe to call twice."""
        pass


class AsyncTransaction(ABC):
    """Awaitable transaction handle."""

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the handle, rolling back if it is still open. Safe to call twice."""
        pass


class DataSession(ABC):
    """Querying and change staging shared by every session flavour."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Database name used in logs and errors."""
        pass

    @abstractmethod
    def query(self, model: Type[T]) -> Query[T]:
        pass

    @abstractmethod
    async def find(self, model: Type[T], id: Any) -> Optional[T]:
        """Identity lookup."""
        pass

    @abstractmethod
    def add(self, entity: Any) -> None:
        pass

    @abstractmethod
    def update(self, entity: Any) -> None:
        pass

    @abstractmethod
    async def remove(self, entity: Any) -> None:
        pass


class AsyncDataSession(DataSession):
    """Session whose save and transaction primitives are awaitable."""

    @abstractmethod
    async def save_changes(self) -> None:
        pass

    @abstractmethod
    async def begin_transaction(self) -> AsyncTransaction:
        pass


class SyncDataSession(DataSession):
    """Session whose save and transaction primitives block."""

    @abstractmethod
    def save_changes(self) -> None:
        pass

    @abstractmethod
    def begin_transaction(self) -> Transaction:
        pass
