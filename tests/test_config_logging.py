"""Settings and logging test cases."""
from loguru import logger

from repokit.config import Settings
from repokit.logging import LogConfig, get_logger, trace_context


class TestSettings:
    def test_defaults(self):
        """Test defaults."""
        settings = Settings(_env_file=None)

        assert settings.DATABASE_URL.startswith("sqlite+aiosqlite://")
        assert settings.ALLOW_MIGRATION is True

    def test_environment_overrides(self, monkeypatch):
        """Test environment overrides."""
        monkeypatch.setenv("DB_NAME", "heroes_db")
        monkeypatch.setenv("allow_migration", "false")

        settings = Settings(_env_file=None)

        assert settings.DB_NAME == "heroes_db"
        assert settings.ALLOW_MIGRATION is False

    def test_sync_database_url(self):
        """Test sync database url."""
        assert Settings(DATABASE_URL="sqlite+aiosqlite:///./app.db").SYNC_DATABASE_URL == "sqlite:///./app.db"
        assert Settings(DATABASE_URL="mysql+aiomysql://u:p@db/app").SYNC_DATABASE_URL == "mysql+pymysql://u:p@db/app"
        assert Settings(DATABASE_URL="postgresql+asyncpg://u:p@db/app").SYNC_DATABASE_URL == "postgresql://u:p@db/app"


class TestLogging:
    def test_trace_context_and_component(self):
        """Test trace context and component."""
        records = []
        handler_id = logger.add(lambda message: records.append(message.record), level="TRACE")
        try:
            with trace_context("req-42"):
                get_logger("repository").trace("inside")
            get_logger().info("outside")
        finally:
            logger.remove(handler_id)

        assert records[0]["extra"] == {"trace_id": "req-42", "component": "repository"}
        assert records[1]["extra"].get("trace_id") != "req-42"

    def test_setup_logging_writes_files(self, tmp_path):
        """Test setup logging writes files."""
        try:
            LogConfig.setup_logging(level="DEBUG", log_dir=str(tmp_path / "logs"), to_file=True)
            logger.error("disk check")
            logger.complete()
        finally:
            logger.remove()
            logger.configure(extra={})

        names = sorted(path.name.split("_")[0] for path in (tmp_path / "logs").iterdir())
        assert names == ["app", "error"]
