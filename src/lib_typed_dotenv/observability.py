"""Structured logging for the dotenv parsing pipeline.

Purpose
    Every diagnostic the library emits is a short event name (``cache_hit``,
    ``file_parse_failed``, ...) plus a ``context`` mapping attached to the log
    record. The context always carries the ``trace_id`` of the parse batch, so
    the lines produced by one :meth:`EnvFileLoader.parse_files` call, including
    those logged from fetch worker threads, can be grouped together.

Contents
    - ``TRACE_ID``: context variable holding the active trace identifier.
    - ``get_logger``: the package logger, silent until the host adds handlers.
    - ``bind_trace_id``: set or clear the trace identifier by hand.
    - ``batch_trace``: bind a fresh identifier for the duration of one batch.
    - ``log_debug`` / ``log_info`` / ``log_warning`` / ``log_error``.
    - ``make_event``: ``stage``/``path`` payload builder.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Final, Iterator, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_typed_dotenv_trace_id", default=None)

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_typed_dotenv")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the ``lib_typed_dotenv`` logger so applications may attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind *trace_id* for subsequent log entries; ``None`` clears it.

    Examples
    --------
    >>> bind_trace_id('abc123')
    >>> TRACE_ID.get()
    'abc123'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


@contextmanager
def batch_trace() -> Iterator[str]:
    """Make sure a trace identifier is bound while a parse batch runs.

    An identifier bound by the caller is reused as is; otherwise a random one
    is bound and removed again on exit.

    Examples
    --------
    >>> with batch_trace() as trace_id:
    ...     TRACE_ID.get() == trace_id
    True
    >>> TRACE_ID.get() is None
    True
    """

    current = TRACE_ID.get()
    if current is not None:
        yield current
        return
    trace_id = uuid.uuid4().hex
    token = TRACE_ID.set(trace_id)
    try:
        yield trace_id
    finally:
        TRACE_ID.reset(token)


def log_debug(message: str, **fields: Any) -> None:
    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    _emit(logging.INFO, message, fields)


def log_warning(message: str, **fields: Any) -> None:
    _emit(logging.WARNING, message, fields)


def log_error(message: str, **fields: Any) -> None:
    _emit(logging.ERROR, message, fields)


def make_event(stage: str, path: str | None, payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Return ``{"stage": ..., "path": ...}`` extended with *payload*.

    ``stage`` is one of ``fetch``, ``cache``, ``parse``, ``types``,
    ``interpolate`` or ``load``. Payload keys never replace ``stage`` or ``path``.

    Examples
    --------
    >>> make_event('cache', '/app/.env', {'hits': 3})
    {'stage': 'cache', 'path': '/app/.env', 'hits': 3}
    >>> make_event('parse', None, {'stage': 'other'})
    {'stage': 'parse', 'path': None}
    """

    event: dict[str, Any] = {"stage": stage, "path": path}
    for key, value in (payload or {}).items():
        event.setdefault(key, value)
    return event


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    if not _LOGGER.isEnabledFor(level):
        return
    _LOGGER.log(level, message, extra={"context": {"trace_id": TRACE_ID.get(), **fields}})
