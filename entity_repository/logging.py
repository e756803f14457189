"""
Logging for the query engine.

Everything is emitted on the `entity_repository` logger, so host
applications keep control of the root logger. Two output styles exist:

- text: one line per record, with the source location for WARNING and
  above and any bound query fields appended as `key=value`
- json: one object per record, suitable for log aggregation

Query fields (entity name, page window, caller-supplied request ids) are
bound through a context variable, so every record emitted while a query
runs carries them without passing them to each call:

    with query_log_context(request_id="abc-123"):
        page = await repo.get_paginated(query)
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

from entity_repository.settings import app_settings

LOGGER_NAME = "entity_repository"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Fields bound for the query currently running in this task
_query_fields: ContextVar[dict[str, Any]] = ContextVar(
    "entity_repository_query_fields", default={}
)

# Everything a bare LogRecord carries; other attributes came from `extra`
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "context_suffix"}


def set_log_context(**fields: Any) -> None:
    """
    Bind fields to every record logged from the current context.

    Args:
        **fields: Field values; existing keys are overwritten.
    """
    _query_fields.set({**_query_fields.get(), **fields})


def get_log_context() -> dict[str, Any]:
    """Return the fields currently bound to log records."""
    return _query_fields.get()


def clear_log_context() -> None:
    _query_fields.set({})


@contextmanager
def query_log_context(**fields: Any) -> Iterator[None]:
    """
    Bind fields for the duration of a block, restoring the previous ones.

    Nested blocks add to the fields bound by enclosing blocks.

    Example:
        >>> with query_log_context(entity="Product"):
        ...     logger.debug("Composed predicate")  # carries entity=Product
    """
    token = _query_fields.set({**_query_fields.get(), **fields})
    try:
        yield
    finally:
        _query_fields.reset(token)


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_ATTRS
    }


class StructuredJSONFormatter(logging.Formatter):
    """
    Formats records as single-line JSON objects.

    Output holds timestamp, level, logger, message and source location,
    then the bound query fields, then anything passed through `extra`.
    Exceptions are rendered under `exception`. Values that are not JSON
    serializable (Decimal, datetime, UUID) are written via `str`.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, _DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
            "environment": app_settings.ENVIRONMENT,
        }
        payload.update(get_log_context())
        payload.update(_extra_fields(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Single-line console formatter.

    INFO records show time, level and message. Other levels also show where
    the record was emitted. Bound query fields are appended in brackets.
    """

    BRIEF_FMT = "%(asctime)s - %(levelname)s: %(message)s%(context_suffix)s"
    LOCATED_FMT = (
        "%(asctime)s - %(levelname)s: %(module)s.%(funcName)s:%(lineno)d"
        " - %(message)s%(context_suffix)s"
    )

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._brief = logging.Formatter(self.BRIEF_FMT, datefmt=_DATE_FORMAT)
        self._located = logging.Formatter(
            self.LOCATED_FMT, datefmt=_DATE_FORMAT
        )

    def format(self, record: logging.LogRecord) -> str:
        fields = get_log_context()
        record.context_suffix = (
            " [" + " ".join(f"{k}={v}" for k, v in fields.items()) + "]"
            if fields
            else ""
        )
        if record.levelno == logging.INFO:
            return self._brief.format(record)
        return self._located.format(record)


def setup_logging(
    level: str | None = None,
    log_format: str | None = None,
    file_path: str | None = None,
) -> logging.Logger:
    """
    Configure the `entity_repository` logger.

    Arguments default to LOG_LEVEL, LOG_FORMAT and LOG_FILE_PATH from the
    settings. Calling this again replaces previously installed handlers.

    Args:
        level: Logger level name.
        log_format: "text" or "json" for console output.
        file_path: Optional file receiving ERROR records as JSON.

    Returns:
        The configured logger.
    """
    level = level or app_settings.LOG_LEVEL
    log_format = log_format or app_settings.LOG_FORMAT
    file_path = file_path or app_settings.LOG_FILE_PATH

    configured = logging.getLogger(LOGGER_NAME)
    configured.setLevel(level.upper())
    configured.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        StructuredJSONFormatter()
        if log_format == "json"
        else HumanReadableFormatter()
    )
    configured.addHandler(console)

    if file_path:
        try:
            errors_file = logging.FileHandler(file_path)
        except OSError as e:
            configured.warning(f"Could not open log file {file_path}: {e}")
        else:
            errors_file.setLevel(logging.ERROR)
            errors_file.setFormatter(StructuredJSONFormatter())
            configured.addHandler(errors_file)

    return configured


logger = setup_logging()
