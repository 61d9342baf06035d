"""
Repository abstract base class and generic implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, List, Mapping, Optional, Sequence, Type, TypeVar, Union

from repokit.database.base import DataSession, Query
from repokit.exceptions import RecordNotFoundError
from repokit.expressions import Expression, describe, field_equals
from repokit.logging import get_logger
from repokit.utils.merge import IDENTITY_FIELD, merge

T = TypeVar("T")

Filter = Union[Expression, Callable[[Any], Any]]
Projection = Union[Expression, Callable[[Any], Any]]
Includes = Union[str, Sequence[str]]

logger = get_logger("repository")

# distinguishes "no identity lookup" from a lookup of None
_NO_ID = object()


class IRepository(ABC, Generic[T]):
    """Repository interface; defines standard data access API."""

    @abstractmethod
    async def insert(self, entity: T) -> T:
        """Stage a new entity."""
        pass

    @abstractmethod
    async def exists(self, filter: Optional[Filter] = None) -> bool:
        pass

    @abstractmethod
    async def count(self, filter: Optional[Filter] = None) -> int:
        pass

    @abstractmethod
    async def list(
        self,
        filter: Optional[Filter] = None,
        includes: Optional[Includes] = None,
        projection: Optional[Projection] = None,
    ) -> List[Any]:
        pass

    @abstractmethod
    async def get_by_id(
        self,
        id: str,
        includes: Optional[Includes] = None,
        projection: Optional[Projection] = None,
    ) -> Optional[Any]:
        pass

    @abstractmethod
    async def get_first(
        self,
        filter: Optional[Filter] = None,
        includes: Optional[Includes] = None,
        projection: Optional[Projection] = None,
    ) -> Optional[Any]:
        pass

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Stage a fully populated entity as modified."""
        pass

    @abstractmethod
    async def update_by_id(self, id: str, values: Union[T, Mapping[str, Any]]) -> T:
        """Load the record by id and merge ``values`` onto it."""
        pass

    @abstractmethod
    async def delete(self, entity: T) -> None:
        """Stage an entity for removal."""
        pass

    @abstractmethod
    async def delete_by_id(self, id: str) -> None:
        """Load the record by id and stage it for removal."""
        pass


class Repository(IRepository[T]):
    """
    Generic repository over a storage session; writes only stage changes.

    Nothing reaches the database until the owning unit of work saves or commits.
    Subclasses can add custom queries or override ``apply_filter`` / ``apply_includes``.
    """

    def __init__(self, session: DataSession, model: Type[T]):
        """Initialize repository with session and model."""
        self.session = session
        self.model = model
        self._entity_name = model.__name__

    # --- Create ---

    async def insert(self, entity: T) -> T:
        logger.trace(f"Creating new {self._entity_name} record {entity!r}")
        self.session.add(entity)
        return entity

    # --- Read ---

    async def exists(self, filter: Optional[Filter] = None) -> bool:
        logger.trace(f"Checking existence of {self._entity_name} records with filter: {describe(filter)}")

        query = self._build_query(filter=filter)
        records_exist = await query.any()

        if records_exist:
            logger.trace(f"{self._entity_name} records found")
        else:
            logger.trace(f"No {self._entity_name} records found")
        return records_exist

    async def count(self, filter: Optional[Filter] = None) -> int:
        logger.trace(f"Checking number of {self._entity_name} records with filter: {describe(filter)}")

        query = self._build_query(filter=filter)
        number_of_records = await query.count()

        logger.trace(f"{number_of_records} {self._entity_name} records found")
        return number_of_records

    async def list(
        self,
        filter: Optional[Filter] = None,
        includes: Optional[Includes] = None,
        projection: Optional[Projection] = None,
    ) -> List[Any]:
        if projection is None:
            logger.trace(f"Fetching {self._entity_name} records with filter: {describe(filter)}")
        else:
            logger.trace(
                f"Fetching {self._entity_name} records with filter: {describe(filter)} "
                f"and selector: {describe(projection)}"
            )

        query = self._build_query(filter=filter, includes=includes, projection=projection)
        records = await query.to_list()

        logger.trace(f"Fetched {len(records)} {self._entity_name} records")
        return records

    async def get_by_id(
        self,
        id: str,
        includes: Optional[Includes] = None,
        projection: Optional[Projection] = None,
    ) -> Optional[Any]:
        logger.trace(f"Fetching {self._entity_name} record {id}")

        query = self._build_query(id=id, includes=includes, projection=projection)
        record = await query.first()

        if record is None:
            logger.error(f"{self._entity_name} record {id} not found")
        return record

    async def get_first(
        self,
        filter: Optional[Filter] = None,
        includes: Optional[Includes] = None,
        projection: Optional[Projection] = None,
    ) -> Optional[Any]:
        logger.trace(f"Fetching first {self._entity_name} record with filter: {describe(filter)}")

        query = self._build_query(filter=filter, includes=includes, projection=projection)
        record = await query.first()

        if record is None:
            logger.error(f"No {self._entity_name} record found")
        return record

    # --- Update ---

    async def update(self, entity: T) -> T:
        self.session.update(entity)
        return entity

    async def update_by_id(self, id: str, values: Union[T, Mapping[str, Any]]) -> T:
        record = await self._find_or_raise(id)
        merge(record, values)
        self.session.update(record)
        return record

    # --- Delete ---

    async def delete(self, entity: T) -> None:
        await self.session.remove(entity)

    async def delete_by_id(self, id: str) -> None:
        record = await self._find_or_raise(id)
        await self.session.remove(record)

    # --- Query hooks ---

    def apply_filter(self, query: Query, filter: Optional[Filter] = None) -> Query:
        if filter is not None:
            query = query.where(filter)
        return query

    def apply_includes(self, query: Query, includes: Optional[Sequence[str]] = None) -> Query:
        """Eager-load the first comma-separated segment of each include entry."""
        if includes is None:
            return query

        for include in includes:
            nested = _split(include)
            if not nested:
                continue
            query = query.include(nested[0])
        return query

    # --- Helpers ---

    async def _find_or_raise(self, id: str) -> T:
        record = await self.session.find(self.model, id)
        if record is None:
            raise RecordNotFoundError(self._entity_name, id)
        return record

    def _build_query(
        self,
        id: Any = _NO_ID,
        filter: Optional[Filter] = None,
        includes: Optional[Includes] = None,
        projection: Optional[Projection] = None,
    ) -> Query:
        query = self.session.query(self.model)

        if id is not _NO_ID:
            query = query.where(field_equals(IDENTITY_FIELD, id))
        else:
            query = self.apply_filter(query, filter)

        query = self.apply_includes(query, self._get_includes(includes))

        if projection is not None:
            query = query.select(projection)
        return query

    @staticmethod
    def _get_includes(includes: Optional[Includes] = None) -> Optional[List[str]]:
        if includes is None:
            return None
        if isinstance(includes, str):
            return _split(includes)
        return [include for include in includes]


def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]
