"""
structlog setup shared by every module: `from .logging_config import logger`.
"""
import logging
import sys

import structlog

from . import config

# Libraries whose INFO output would drown the app's own events
NOISY_LOGGERS = ("httpx", "openai", "sentence_transformers", "sqlalchemy.engine")


def _renderer(json_logs: bool):
    if json_logs:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def setup_logging(log_level: str = "INFO", json_logs: bool = False):
    """
    Configure structlog and the stdlib root logger to the same level.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR; unknown names fall back to INFO
        json_logs: One JSON object per line instead of the coloured console format
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.set_exc_info,
            *_renderer(json_logs),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )
    return structlog.get_logger("ragbot")


logger = setup_logging(config.LOG_LEVEL, config.JSON_LOGS)
