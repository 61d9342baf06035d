"""
Repository pattern: data access abstraction, decouples application code from the storage session.
"""

from .base import IRepository, Repository
from .unit_of_work import Active, BaseUnitOfWork, Idle, SyncUnitOfWork, UnitOfWork

__all__ = [
    "IRepository",
    "Repository",
    "BaseUnitOfWork",
    "UnitOfWork",
    "SyncUnitOfWork",
    "Idle",
    "Active",
]
