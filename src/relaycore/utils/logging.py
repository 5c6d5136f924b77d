"""
Structured logging for relaycore.

Thin layer over the standard library ``logging`` module:

- ``get_logger(__name__)`` returns a logger adapter that merges the fields of
  any active ``LogContext`` into the ``extra`` of every record.
- ``configure_logging`` / ``set_level`` / ``enable_debug`` / ``disable_logging``
  act only on the package root logger (``relaycore``).

Example:
    >>> from relaycore.utils.logging import get_logger, LogContext
    >>> _logger = get_logger(__name__)
    >>> with LogContext(paymaster="0xabc..."):
    ...     _logger.info("Resolving deployment", extra={"step": "paymaster"})
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Dict, MutableMapping, Optional, Tuple, Union

ROOT_LOGGER_NAME = "relaycore"

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_context_fields: ContextVar[Dict[str, Any]] = ContextVar("relaycore_log_context", default={})

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class _ContextAdapter(logging.LoggerAdapter):
    """Merges LogContext fields with per-call ``extra``."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        fields = dict(_context_fields.get())
        call_extra = kwargs.get("extra")
        if call_extra:
            fields.update(call_extra)
        if fields:
            kwargs["extra"] = fields
        return msg, kwargs


def get_logger(name: str) -> logging.LoggerAdapter:
    """
    Get a relaycore logger.

    Names outside the package namespace are nested under ``relaycore`` so that
    package-level configuration still applies.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Logger adapter aware of LogContext fields
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return _ContextAdapter(logging.getLogger(name), {})


def configure_logging(
    level: Union[int, str] = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """
    Attach a handler to the package root logger.

    Calling it again replaces the previously configured handler.

    Args:
        level: Log level for the package
        fmt: Format string for the handler
        handler: Handler to use (default: StreamHandler to stderr)

    Returns:
        The package root logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for existing in list(root.handlers):
        if getattr(existing, "_relaycore_configured", False):
            root.removeHandler(existing)

    handler = handler or logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt))
    handler._relaycore_configured = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level)
    return root


def set_level(level: Union[int, str]) -> None:
    """Set the package log level."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)


def enable_debug() -> None:
    """Shortcut for ``set_level(logging.DEBUG)``."""
    set_level(logging.DEBUG)


def disable_logging() -> None:
    """Silence every relaycore logger."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.CRITICAL + 1)


class LogContext:
    """
    Context manager adding fields to every relaycore log record inside it.

    Contexts nest; inner fields override outer ones with the same name.
    """

    def __init__(self, **fields: Any) -> None:
        self._fields = fields
        self._token = None

    def __enter__(self) -> "LogContext":
        merged = dict(_context_fields.get())
        merged.update(self._fields)
        self._token = _context_fields.set(merged)
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._token is not None:
            _context_fields.reset(self._token)
            self._token = None
