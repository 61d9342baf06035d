"""
repokit: generic repositories, units of work and expression-based queries over SQLModel.
"""

from .exceptions import (
    NoActiveTransactionError,
    PersistenceError,
    QueryError,
    RecordNotFoundError,
    TransactionConflictError,
    UnsupportedOperatorError,
)
from .expressions import Parameter, describe, field, field_equals, record
from .repository import IRepository, Repository, SyncUnitOfWork, UnitOfWork
from .utils import merge
from .database.manager import DatabaseManager

__version__ = "0.1.0"

__all__ = [
    "IRepository",
    "Repository",
    "UnitOfWork",
    "SyncUnitOfWork",
    "DatabaseManager",
    "Parameter",
    "field",
    "field_equals",
    "record",
    "describe",
    "merge",
    "PersistenceError",
    "RecordNotFoundError",
    "TransactionConflictError",
    "NoActiveTransactionError",
    "UnsupportedOperatorError",
    "QueryError",
]
