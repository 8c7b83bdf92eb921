"""Logging setup for medtrack.

structlog renders events; the standard library routes them to stdout and to
two rotating files under ``logs/`` (everything, and errors only). JSON lines
are written in production and staging.

Patient contact details never reach the log output in clear text: any
``email``, ``phone`` or ``to`` key on an event is masked before rendering.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

DEFAULT_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
JSON_ENVIRONMENTS = frozenset({"production", "staging"})
CONTACT_KEYS = ("email", "phone", "to")

_MAX_BYTES = 10 * 1024 * 1024
_BACKUPS = 5


def current_env() -> str:
    return (os.getenv("PROTEAN_ENV") or os.getenv("ENVIRONMENT") or "development").lower()


def get_log_level() -> str:
    """``LOG_LEVEL`` wins; otherwise the level follows the environment."""
    return os.getenv("LOG_LEVEL", DEFAULT_LEVELS.get(current_env(), "INFO"))


def mask_contact(value: str) -> str:
    """Keep just enough of an address or number to tell patients apart.

    >>> mask_contact("jane.doe@example.com")
    'j***@example.com'
    >>> mask_contact("+15551234567")
    '********4567'
    """
    if not value:
        return value
    if "@" in value:
        local, _, host = value.partition("@")
        return f"{local[:1]}***@{host}"
    return "*" * max(len(value) - 4, 0) + value[-4:]


def _mask_contact_fields(_logger, _method, event_dict: dict) -> dict:
    for key in CONTACT_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str):
            event_dict[key] = mask_contact(value)
    return event_dict


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path, maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def _install_handlers(level: str, log_dir: Path) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [
        console,
        _rotating_file(log_dir / "medtrack.log", level),
        _rotating_file(log_dir / "medtrack_error.log", logging.ERROR),
    ]

    # Quieten framework chatter below warnings
    for noisy in ("protean", "asyncio", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _renderer(env: str):
    if env in JSON_ENVIRONMENTS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=4),
    )


def _install_structlog(env: str) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _mask_contact_fields,
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _renderer(env),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str | Path = "logs") -> None:
    """Wire stdlib handlers and structlog for the current environment."""
    _install_handlers(get_log_level(), Path(log_dir))
    _install_structlog(current_env())


def bind_caller(user_id: str, role: str, **extra: Any) -> None:
    """Tag every log line emitted for the rest of this request with the caller."""
    structlog.contextvars.bind_contextvars(user_id=user_id, role=role, **extra)


def clear_caller() -> None:
    structlog.contextvars.clear_contextvars()
