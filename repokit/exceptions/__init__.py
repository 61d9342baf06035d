from .errors import (
    NoActiveTransactionError,
    PersistenceError,
    QueryError,
    RecordNotFoundError,
    TransactionConflictError,
    UnsupportedOperatorError,
)

__all__ = [
    "PersistenceError",
    "RecordNotFoundError",
    "TransactionConflictError",
    "NoActiveTransactionError",
    "UnsupportedOperatorError",
    "QueryError",
]
