"""Logger factory and secret masking for config dumps and published contexts."""

import logging
import os
from threading import Lock
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

LOG_LEVEL_ENV = "SQL_IMPORT_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "sql_import"
MASK = "***"

_SETUP_LOCK = Lock()
_CONFIGURED = False

# Values under these keys are replaced entirely.
_SECRET_KEYS = frozenset({"password", "secret", "token", "sql_import.connection.password"})
# Values under these keys are SQLAlchemy URLs; only their password is masked.
_URL_KEYS = frozenset({"connection_string", "sql_import.connection.url"})


def _level_from(value: str | int | None) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName((value or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attach one stderr handler to the ``sql_import`` logger tree.

    ``level`` falls back to ``SQL_IMPORT_LOG_LEVEL`` and then INFO. Calling again
    only changes the level.
    """
    global _CONFIGURED
    root = logging.getLogger(ROOT_LOGGER_NAME)

    with _SETUP_LOCK:
        if not _CONFIGURED:
            if not root.handlers:
                handler = logging.StreamHandler()
                handler.setFormatter(logging.Formatter(LOG_FORMAT))
                root.addHandler(handler)
            _CONFIGURED = True
        root.setLevel(_level_from(level if level is not None else os.getenv(LOG_LEVEL_ENV)))

    return root


def get_logger(name: str) -> logging.Logger:
    if not _CONFIGURED:
        configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def mask_url_password(value: str) -> str:
    """Hide the password of a database URL; strings that are not URLs pass through."""
    try:
        url = make_url(value)
    except ArgumentError:
        return value
    if url.password is None:
        return value
    return url.render_as_string(hide_password=True)


def redact_config(values: dict[str, Any]) -> dict[str, Any]:
    redacted: dict[str, Any] = {}
    for key, value in values.items():
        lowered = key.lower()
        if isinstance(value, dict):
            redacted[key] = redact_config(value)
        elif value is None:
            redacted[key] = None
        elif lowered in _SECRET_KEYS or lowered.endswith("_password"):
            redacted[key] = MASK
        elif lowered in _URL_KEYS and isinstance(value, str):
            redacted[key] = mask_url_password(value)
        else:
            redacted[key] = value
    return redacted
