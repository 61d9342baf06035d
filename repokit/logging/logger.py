import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
from loguru import logger
from repokit.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<magenta>Trace:{extra[trace_id]}</magenta> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | Trace:{extra[trace_id]} - {message}"


class LogConfig:
    """Global logging configuration using Loguru."""
    @classmethod
    def setup_logging(
        cls,
        level: Optional[str] = None,
        log_dir: Optional[str] = None,
        to_file: Optional[bool] = None,
    ):
        level = level or settings.LOG_LEVEL
        to_file = settings.LOG_TO_FILE if to_file is None else to_file

        logger.remove()

        logger.add(
            sys.stdout,
            enqueue=True,
            backtrace=True,
            diagnose=True,
            format=CONSOLE_FORMAT,
            level=level,
        )

        if to_file:
            directory = Path(log_dir or settings.LOG_DIR)
            directory.mkdir(parents=True, exist_ok=True)

            logger.add(
                directory / "app_{time:YYYY-MM-DD}.log",
                rotation="00:00",
                retention="30 days",
                compression="zip",
                enqueue=True,
                format=FILE_FORMAT,
                level="TRACE",
            )

            logger.add(
                directory / "error_{time:YYYY-MM-DD}.log",
                level="ERROR",
                rotation="100 MB",
                enqueue=True,
            )

        logger.configure(extra={"trace_id": "system"})


@contextmanager
def trace_context(trace_id: str) -> Iterator[None]:
    """Tag every record logged inside the block with ``trace_id``."""
    with logger.contextualize(trace_id=trace_id):
        yield


def get_logger(name: str = None):
    """Get logger instance, optionally bound to a component name."""
    if name:
        return logger.bind(component=name)
    return logger
