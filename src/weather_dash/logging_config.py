"""Centralized logging configuration."""

import logging

from weather_dash.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that install their own handlers
THIRD_PARTY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "fastapi",
    "fastapi_cache",
)


def _console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(level: str = LOG_LEVEL) -> None:
    """
    Configure one console format for the proxy service and the dashboard core.

    Args:
        level: Log level name, e.g. "INFO" or "DEBUG"
    """
    numeric_level = logging.getLevelName(level)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(_console_handler(numeric_level, formatter))

    for logger_name in THIRD_PARTY_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(numeric_level)

        # Drop handlers installed by the library to avoid duplicate lines
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.propagate = False
        logger.addHandler(_console_handler(numeric_level, formatter))
