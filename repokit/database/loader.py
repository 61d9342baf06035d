"""
Startup tasks for a database: apply pending schema migrations, then run an application hook
(e.g. loading default data).
"""

import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine

from repokit.config import settings
from repokit.logging import get_logger
from .base import DataSession

logger = get_logger("database_loader")


class MigrationRunner(ABC):
    """Schema migration collaborator."""

    @abstractmethod
    async def pending_migrations(self) -> List[str]:
        """Revisions not yet applied, oldest first."""
        pass

    @abstractmethod
    async def migrate(self) -> None:
        """Apply every pending migration."""
        pass


class AlembicMigrationRunner(MigrationRunner):
    """
    Alembic-backed migrations.

    The config must carry ``script_location`` and a blocking ``sqlalchemy.url``; Alembic
    calls run in a worker thread.
    """

    def __init__(self, config: Config):
        self.config = config

    @classmethod
    def from_settings(cls, settings) -> "AlembicMigrationRunner":
        config = Config(settings.ALEMBIC_CONFIG)
        if settings.ALEMBIC_SCRIPT_LOCATION:
            config.set_main_option("script_location", settings.ALEMBIC_SCRIPT_LOCATION)
        # configparser interpolation: escape '%' in quoted passwords
        config.set_main_option("sqlalchemy.url", settings.SYNC_DATABASE_URL.replace("%", "%%"))
        return cls(config)

    async def pending_migrations(self) -> List[str]:
        return await asyncio.to_thread(self._pending_migrations)

    async def migrate(self) -> None:
        await asyncio.to_thread(command.upgrade, self.config, "head")

    def _current_heads(self) -> tuple:
        engine = create_engine(self.config.get_main_option("sqlalchemy.url"))
        try:
            with engine.connect() as connection:
                return MigrationContext.configure(connection).get_current_heads()
        finally:
            engine.dispose()

    def _pending_migrations(self) -> List[str]:
        script = ScriptDirectory.from_config(self.config)
        applied = set(self._current_heads())

        pending = []
        # walks from the heads down; assumes a linear history
        for revision in script.walk_revisions():
            if revision.revision in applied:
                break
            pending.append(revision.revision)
        return list(reversed(pending))


class DatabaseLoader(ABC):
    """
    Runs once at application start, before any repository traffic.

    Subclasses implement ``on_execute`` for their own startup work; migrations run first
    unless disabled.
    """

    def __init__(self, session: DataSession, migrations: MigrationRunner):
        self.session = session
        self.migrations = migrations
        self._database_name = session.name

    @abstractmethod
    async def on_execute(self) -> None:
        """Run administrative tasks on startup such as loading default data into the database."""
        pass

    async def execute(self, allow_migration: Optional[bool] = None) -> None:
        """Run startup tasks; ``allow_migration`` defaults to ``settings.ALLOW_MIGRATION``."""
        if allow_migration is None:
            allow_migration = settings.ALLOW_MIGRATION
        if allow_migration:
            await self._handle_migrations()
        await self.on_execute()

    async def _handle_migrations(self) -> None:
        logger.info(f"Checking migration status of database {self._database_name}")

        pending_migrations = await self.migrations.pending_migrations()

        if not pending_migrations:
            logger.info(f"There are no pending migrations for database {self._database_name}")
            return

        logger.info(f"Discovered {len(pending_migrations)} pending migrations for database {self._database_name}")
        await self.migrations.migrate()
        logger.info(f"All migrations have been applied to database {self._database_name}")
