from .base import (
    AsyncDataSession,
    AsyncTransaction,
    DataSession,
    Query,
    SyncDataSession,
    Transaction,
)
from .session import AsyncSQLModelSession, SQLModelQuery, SQLModelSession

__all__ = [
    "DataSession",
    "AsyncDataSession",
    "SyncDataSession",
    "Query",
    "Transaction",
    "AsyncTransaction",
    "SQLModelSession",
    "AsyncSQLModelSession",
    "SQLModelQuery",
]
