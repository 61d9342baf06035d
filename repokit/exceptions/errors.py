"""
Persistence errors: typed failures raised by repositories, units of work and the expression describer.
"""

from typing import Any


class PersistenceError(Exception):
    """Base class for persistence errors; keeps the message and the context it was raised with."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context


class RecordNotFoundError(PersistenceError):
    """Identity-addressed update/delete found no record."""

    def __init__(self, entity_name: str, record_id: Any):
        super().__init__(
            f"{entity_name} record {record_id} not found",
            entity_name=entity_name,
            record_id=record_id,
        )
        self.entity_name = entity_name
        self.record_id = record_id


class TransactionConflictError(PersistenceError):
    """A transaction was started while another one is still active."""

    def __init__(self, database_name: str):
        super().__init__(
            f"A transaction is already in progress for database {database_name}",
            database_name=database_name,
        )
        self.database_name = database_name


class NoActiveTransactionError(PersistenceError):
    """Commit or rollback was requested without an active transaction."""

    def __init__(self, database_name: str):
        super().__init__(
            f"No active transaction for database {database_name}",
            database_name=database_name,
        )
        self.database_name = database_name


class UnsupportedOperatorError(PersistenceError):
    """An expression tree contains a node kind the visitor cannot handle."""

    def __init__(self, node_type: Any, kind: str = "Operator"):
        name = getattr(node_type, "value", node_type)
        super().__init__(f"{kind} '{name}' is not supported.", node_type=node_type)
        self.node_type = node_type


class QueryError(PersistenceError):
    """A query references a member or relation the mapped model does not have."""
