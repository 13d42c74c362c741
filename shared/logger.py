"""
KeySmith Structured Logger
==========================

:class:`KeySmithLogger` wraps a stdlib :class:`logging.Logger` named
``keysmith.<component>``. Records go to a Rich handler on stderr and,
when a log file is configured, to a rotating file as plain text or JSON
lines. Every record carries the component name and the active operation.

Callers must never pass a raw password or a full digest as a log field.
Lengths, masked forms and the 5-character hash prefix are fine.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOGGER_PREFIX = "keysmith"
_EXTRA_ATTR = "keysmith_extra"
_RESERVED_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel"})
_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)


# ========================== Formatters / Handlers ==========================


class _JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Example::

        {"timestamp": "...", "level": "WARNING", "logger": "keysmith.breach",
         "message": "Breach lookup failed", "tool_name": "breach",
         "operation": "range_lookup", "extra": {"prefix": "5BAA6"}}
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key))
            for key in ("tool_name", "operation")
            if getattr(record, key, None) is not None
        )
        fields = getattr(record, _EXTRA_ATTR, None)
        if fields:
            entry["extra"] = fields
        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class _ColorConsoleHandler(RichHandler):
    """:class:`rich.logging.RichHandler` on a themed stderr console."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(
            console=Console(theme=_LOG_THEME, stderr=True),
            show_path=False,
            show_time=True,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=False,
            **kwargs,
        )


def _file_handler(
    path: str | Path, level: int, *, json_logs: bool, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(file_path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    if json_logs:
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, "%Y-%m-%dT%H:%M:%S%z"))
    return handler


# ========================== KeySmithLogger =================================


class KeySmithLogger:
    """Structured logger bound to one KeySmith component.

    Keyword arguments other than ``exc_info``/``stack_info``/``stacklevel``
    become structured fields on the record::

        log = KeySmithLogger("breach", log_file="keysmith.log", json_logs=True)
        with log.operation("range_lookup"):
            log.warning("Breach lookup failed", prefix=prefix)

    Args:
        tool_name:       Component name, e.g. ``"engine"`` or ``"breach"``.
        log_level:       Minimum level name; unknown names mean WARNING.
        log_file:        Rotating log file path, or ``None`` for none.
        json_logs:       Write JSON lines instead of plain text to the file.
        max_bytes:       Rotation threshold in bytes.
        backup_count:    Rotated files to keep.
        console_output:  Attach the Rich stderr handler.
    """

    def __init__(
        self,
        tool_name: str,
        *,
        log_level: str = "WARNING",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = True,
    ) -> None:
        self._tool_name = tool_name
        self._operation: str | None = None
        level = getattr(logging, log_level.upper(), logging.WARNING)

        self._logger = logging.getLogger(f"{_LOGGER_PREFIX}.{tool_name}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        # Loggers are process-wide; rebuild handlers on every instantiation
        for old in list(self._logger.handlers):
            self._logger.removeHandler(old)
            old.close()

        if console_output:
            self._logger.addHandler(_ColorConsoleHandler(level=level))
        if log_file is not None:
            self._logger.addHandler(
                _file_handler(
                    log_file,
                    level,
                    json_logs=json_logs,
                    max_bytes=max_bytes,
                    backup_count=backup_count,
                )
            )

    @classmethod
    def from_config(cls, tool_name: str, config: Any) -> KeySmithLogger:
        """Build a logger from the ``[global]`` section of a config."""
        gs = config.global_settings
        return cls(
            tool_name,
            log_level="DEBUG" if gs.debug else gs.log_level,
            log_file=gs.log_file,
            json_logs=gs.log_json,
        )

    # ------------------------------------------------------------------ #
    #  Scopes
    # ------------------------------------------------------------------ #

    class _OperationScope:
        def __init__(self, owner: KeySmithLogger, name: str) -> None:
            self._owner = owner
            self._name = name
            self._saved: str | None = None

        def __enter__(self) -> KeySmithLogger:
            self._saved, self._owner._operation = self._owner._operation, self._name
            return self._owner

        def __exit__(self, *exc: Any) -> None:
            self._owner._operation = self._saved

    class _Timer:
        def __init__(self, owner: KeySmithLogger, label: str) -> None:
            self._owner = owner
            self._label = label
            self._start = 0.0
            self._stop: float | None = None

        def __enter__(self) -> KeySmithLogger._Timer:
            self._start = time.perf_counter()
            self._owner.debug("Started: %s", self._label)
            return self

        def __exit__(self, *exc: Any) -> None:
            self._stop = time.perf_counter()
            self._owner.debug("Completed: %s (%.3f sec)", self._label, self.elapsed)

        @property
        def elapsed(self) -> float:
            end = self._stop if self._stop is not None else time.perf_counter()
            return end - self._start

    def operation(self, name: str) -> _OperationScope:
        """Tag records emitted inside the ``with`` block with *name*."""
        return self._OperationScope(self, name)

    def timed(self, label: str) -> _Timer:
        """Log start and completion of *label* at DEBUG with elapsed time."""
        return self._Timer(self, label)

    # ------------------------------------------------------------------ #
    #  Emitters
    # ------------------------------------------------------------------ #

    def _log(self, level: int, msg: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        passthrough = {k: kwargs.pop(k) for k in list(kwargs) if k in _RESERVED_KWARGS}
        extra = dict(kwargs.pop("extra", None) or {})
        extra["tool_name"] = self._tool_name
        extra["operation"] = self._operation
        if kwargs:
            extra[_EXTRA_ATTR] = kwargs
        self._logger.log(level, msg, *args, extra=extra, **passthrough)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, args, kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, args, kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, args, kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, args, kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """ERROR with the active traceback attached."""
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, args, kwargs)

    # ------------------------------------------------------------------ #
    #  Properties
    # ------------------------------------------------------------------ #

    @property
    def tool_name(self) -> str:
        return self._tool_name

    @property
    def underlying(self) -> logging.Logger:
        """The wrapped stdlib logger."""
        return self._logger
