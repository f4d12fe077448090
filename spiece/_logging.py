"""
Structured logging for spiece.

All records go through the single ``spiece`` logger. Two places log, both at
debug level: the native library loader (scope ``native``, attribute ``path``)
and the tokenizer lifecycle (scope ``tokenizer``, attributes ``model_path``
and ``length``). Errors are raised to the caller, not logged.

JSON output follows the OpenTelemetry log data model; human output is one
line per record.

Environment::

    SPIECE_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: warn)
    SPIECE_LOG_FORMAT=json|human (default: human if tty, json if piped)
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from collections.abc import MutableMapping
from importlib.metadata import PackageNotFoundError, version
from typing import Any

__all__ = ["logger", "setup_logging", "scoped_logger"]

_OFF = logging.CRITICAL + 1

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "off": _OFF,
}

_SEVERITY = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}

# Record attributes spiece attaches via ``extra``, in display order.
_ATTRIBUTES = ("model_path", "path", "length")


def _severity(record: logging.LogRecord) -> str:
    return _SEVERITY.get(record.levelno, record.levelname)


def _scope(record: logging.LogRecord) -> str:
    return getattr(record, "scope", None) or "spiece"


def _attributes(record: logging.LogRecord) -> dict[str, Any]:
    return {key: getattr(record, key) for key in _ATTRIBUTES if hasattr(record, key)}


def _location(record: logging.LogRecord) -> str | None:
    """Package-relative ``file:line`` for debug and error records."""
    if logging.INFO <= record.levelno < logging.ERROR:
        return None
    path = record.pathname.replace(os.sep, "/")
    _, sep, tail = path.rpartition("/spiece/")
    return f"{tail if sep else os.path.basename(path)}:{record.lineno}"


class JsonFormatter(logging.Formatter):
    """One JSON object per record (OpenTelemetry log data model)."""

    def __init__(self) -> None:
        super().__init__()
        try:
            self._version = version("spiece")
        except PackageNotFoundError:
            self._version = "0.0.0"

    def format(self, record: logging.LogRecord) -> str:
        seconds = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
        nanos = int(record.created % 1 * 1_000_000) * 1000

        attributes: dict[str, Any] = {"scope": _scope(record), **_attributes(record)}
        location = _location(record)
        if location is not None:
            filepath, _, lineno = location.rpartition(":")
            attributes["code.filepath"] = filepath
            attributes["code.lineno"] = int(lineno)

        return json.dumps(
            {
                "timestamp": f"{seconds}.{nanos:09d}Z",
                "severityText": _severity(record),
                "body": record.getMessage(),
                "attributes": attributes,
                "resource": {"service.name": "spiece", "service.version": self._version},
            },
            separators=(",", ":"),
            default=str,
        )


class HumanFormatter(logging.Formatter):
    """``HH:MM:SS LEVEL [scope] message (model) [file:line]`` for terminals."""

    _RESET = "\x1b[0m"
    _COLORS = {
        logging.DEBUG: "\x1b[2m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[31m",
    }
    _SCOPE_COLOR = "\x1b[36m"
    _DIM = "\x1b[2m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self._use_colors = use_colors

    def _paint(self, text: str, color: str | None) -> str:
        if not self._use_colors or not color:
            return text
        return f"{color}{text}{self._RESET}"

    def format(self, record: logging.LogRecord) -> str:
        clock = time.strftime("%H:%M:%S", time.gmtime(record.created))
        line = (
            f"{clock} {self._paint(f'{_severity(record):<5}', self._COLORS.get(record.levelno))} "
            f"{self._paint(f'[{_scope(record)}]', self._SCOPE_COLOR)} {record.getMessage()}"
        )

        attributes = _attributes(record)
        source = attributes.get("model_path") or attributes.get("path")
        if source:
            line += f" ({source})"
        elif "length" in attributes:
            line += f" ({attributes['length']} bytes)"

        location = _location(record)
        if location is not None:
            line += " " + self._paint(f"[{location}]", self._DIM)
        return line


def _env_level() -> int:
    return _LEVELS.get(os.environ.get("SPIECE_LOG_LEVEL", "warn").lower(), logging.WARNING)


def _env_format() -> str:
    fmt = os.environ.get("SPIECE_LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return "human" if sys.stderr.isatty() else "json"


def _handler(fmt: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(HumanFormatter(use_colors=sys.stderr.isatty()))
    return handler


logger = logging.getLogger("spiece")


def setup_logging(level: str | int = "info", format: str | None = None) -> None:
    """
    Configure spiece logging.

    Replaces any handler on the ``spiece`` logger with one writing to stderr.

    Parameters
    ----------
    level : str or int, default "info"
        A name accepted by ``SPIECE_LOG_LEVEL`` (case-insensitive) or a
        ``logging`` constant. Unknown names fall back to ``info``.

    format : str, optional
        "json" or "human". Defaults to ``SPIECE_LOG_FORMAT``, then to human
        on a terminal and json otherwise.

    Examples
    --------
    ::

        >>> import spiece
        >>> spiece.setup_logging("debug", format="json")
    """
    if isinstance(level, str):
        level = _LEVELS.get(level.lower(), logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.addHandler(_handler((format or _env_format()).lower()))
    logger.setLevel(level)


class _ScopedLoggerAdapter(logging.LoggerAdapter):
    """Adds a fixed scope; per-call ``extra`` is merged on top."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def scoped_logger(scope: str) -> logging.LoggerAdapter:
    """Return an adapter on the ``spiece`` logger that tags records with ``scope``."""
    return _ScopedLoggerAdapter(logger, {"scope": scope})


if not logger.handlers:
    logger.addHandler(_handler(_env_format()))
    logger.setLevel(_env_level())
