"""Logging setup shared by the API, services and scripts.

Call ``setup_logging()`` once at startup; modules get their logger with
``get_logger("contracts.lifecycle")`` which namespaces it under ``policydesk``.
"""

import logging
import sys

from policydesk.config import settings

ROOT_LOGGER_NAME = "policydesk"

_SQL_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite")


def setup_logging() -> None:
    root = logging.getLogger()
    root.setLevel(_parse_level(settings.LOG_LEVEL))

    # uvicorn normally installs a handler; tests and scripts do not
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
        )
        root.addHandler(handler)

    sql_level = _parse_level(settings.LOG_LEVEL_SQL)
    for name in _SQL_LOGGERS:
        logging.getLogger(name).setLevel(sql_level)

    get_logger("logging").debug(
        "Logging configured: root=%s sql=%s", settings.LOG_LEVEL, settings.LOG_LEVEL_SQL
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def _parse_level(raw: str) -> int:
    numeric = getattr(logging, raw.upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO
