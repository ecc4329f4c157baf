"""Logging setup shared by the API server and the CLI."""

import logging.config
import os
import sys
from typing import Optional, Tuple

from dotenv import load_dotenv
from rich.console import Console

# Load environment variables from .env file
load_dotenv()

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG_FILE_NAME = "graphapp.log"


def resolve_log_level(name: Optional[str]) -> Tuple[int, bool]:
    """Map a level name (any case) to its logging constant.

    Returns:
        The level and whether ``name`` was valid; unknown names give INFO
    """
    level = LOG_LEVEL_MAP.get((name or "INFO").strip().upper())
    if level is None:
        return logging.INFO, False
    return level, True


def build_logging_config(log_dir: str, log_level: int) -> dict:
    """Build the ``dictConfig`` mapping: a rotating file and a Rich console."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": "%(message)s"},
            "file": {"format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"},
        },
        "handlers": {
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": os.path.join(log_dir, LOG_FILE_NAME),
                "maxBytes": 1024 * 1024 * 5,  # 5 MB
                "backupCount": 5,
                "formatter": "file",
                "level": log_level,
            },
            "rich": {
                "class": "rich.logging.RichHandler",
                "rich_tracebacks": True,
                "formatter": "console",
                "console": Console(file=sys.stderr),
                "level": log_level,
            },
        },
        "root": {
            "level": log_level,
            "handlers": ["file", "rich"],
        },
        "loggers": {
            # SQL echo is switched on per engine; keep statements out of the logs otherwise
            "sqlalchemy.engine": {"level": logging.WARNING},
            "aiosqlite": {"level": logging.WARNING},
        },
    }


def setup_logging():
    """
    Configures logging for the application.

    Reads configuration from environment variables:
    - LOG_DIR: Directory for log files (default: "logs")
    - LOG_LEVEL: Logging level (default: "INFO")
      Valid values: DEBUG, INFO, WARNING, ERROR, CRITICAL (case-insensitive)
    """
    log_dir = os.getenv("LOG_DIR", "logs")
    log_level, valid = resolve_log_level(os.getenv("LOG_LEVEL"))

    if not valid:
        print(
            f"Warning: Invalid LOG_LEVEL '{os.getenv('LOG_LEVEL')}'. "
            f"Valid values: {', '.join(LOG_LEVEL_MAP)}. Using INFO.",
            file=sys.stderr,
        )

    os.makedirs(log_dir, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_dir, log_level))

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging configured. Level: {logging.getLevelName(log_level)}")
