"""
Structured logging for PongSim.

Every component logs through a ``pongsim.<component>`` logger obtained from
``get_logger``. Context travels in ``extra=`` and is rendered either as a
``key=value`` tail on a console line or as a nested object in JSON files.
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union


ROOT_LOGGER_NAME = "pongsim"
LOG_FILE_NAME = "pongsim.log"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}

_ANSI_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_ANSI_RESET = "\033[0m"


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class StructuredFormatter(logging.Formatter):
    """
    Renders records together with their ``extra`` context.

    ``fmt_type`` is "human" for one readable line per record or "json" for
    one JSON object per line.
    """

    def __init__(self, fmt_type: str = "human", include_extra: bool = True):
        super().__init__()
        self.fmt_type = fmt_type
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        context = self.extract_context(record) if self.include_extra else {}
        if context:
            entry["extra"] = context

        if self.fmt_type == "json":
            return json.dumps(entry, ensure_ascii=False)
        return self._human_line(entry)

    @staticmethod
    def extract_context(record: logging.LogRecord) -> Dict[str, Any]:
        """Fields that were passed with ``extra=``, made JSON-safe."""
        return {
            key: _jsonable(value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES
        }

    def _human_line(self, entry: Dict[str, Any]) -> str:
        level = entry["level"]
        colored = level in _ANSI_LEVEL_COLORS and getattr(sys.stderr, "isatty", lambda: False)()
        level_field = f"{_ANSI_LEVEL_COLORS[level]}{level:<8}{_ANSI_RESET}" if colored else f"{level:<8}"

        line = f"{entry['timestamp'][:19]} {level_field} {entry['logger']:<24} {entry['message']}"

        # Source location only helps when debugging
        if level == "DEBUG":
            line += f" [{entry['module']}:{entry['function']}:{entry['line']}]"

        if "exception" in entry:
            line += "\n" + entry["exception"]

        if entry.get("extra"):
            line += " | " + ", ".join(f"{k}={v}" for k, v in entry["extra"].items())

        return line


class ElapsedTimeFilter(logging.Filter):
    """Stamps each record with ``elapsed_time``, seconds since logging was configured."""

    def __init__(self):
        super().__init__()
        self.started = time.time()

    def filter(self, record: logging.LogRecord) -> bool:
        record.elapsed_time = round(time.time() - self.started, 3)
        return True


class LoggerManager:
    """
    Owns the handlers on the ``pongsim`` logger.

    Console output goes to stderr at the configured level. File output is
    a size-rotated ``pongsim.log`` that always records DEBUG.
    """

    def __init__(self):
        self._loggers: Dict[str, logging.Logger] = {}
        self._configured = False
        self.log_dir: Optional[Path] = None

    def configure(self,
                  log_level: str = "INFO",
                  log_dir: Optional[Union[str, Path]] = None,
                  console_output: bool = True,
                  file_output: bool = True,
                  json_format: bool = False,
                  max_file_size: int = 5 * 1024 * 1024,
                  backup_count: int = 3) -> None:
        """
        Attach handlers to the ``pongsim`` logger. Later calls are ignored
        until ``shutdown``.

        Args:
            log_level: Minimum level for the console and the logger itself
            log_dir: Directory for the log file, ``~/.pongsim/logs`` when None
            console_output: Log to stderr
            file_output: Log to a rotating file
            json_format: Write the file as JSON lines instead of text
            max_file_size: Bytes before the file is rotated
            backup_count: Rotated files to keep
        """
        if self._configured:
            return

        level = getattr(logging, log_level.upper(), logging.INFO)

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(level)
        root.handlers.clear()
        root.propagate = False

        elapsed = ElapsedTimeFilter()
        handlers = []

        if console_output:
            handlers.append(self._console_handler(level))

        if file_output:
            self.log_dir = Path(log_dir) if log_dir else Path.home() / ".pongsim" / "logs"
            handlers.append(self._file_handler(json_format, max_file_size, backup_count))

        for handler in handlers:
            handler.addFilter(elapsed)
            root.addHandler(handler)

        self._configured = True

        self.get_logger("logging").info("Logging configured", extra={
            "log_level": log_level,
            "log_dir": str(self.log_dir) if file_output else None,
            "json_format": json_format,
        })

    def _console_handler(self, level: int) -> logging.Handler:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(StructuredFormatter("human"))
        return handler

    def _file_handler(self, json_format: bool, max_file_size: int, backup_count: int) -> logging.Handler:
        self.log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            self.log_dir / LOG_FILE_NAME,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
        handler.setLevel(logging.DEBUG)
        if json_format:
            handler.setFormatter(StructuredFormatter("json"))
        else:
            handler.setFormatter(StructuredFormatter("human", include_extra=False))
        return handler

    def get_logger(self, name: str) -> logging.Logger:
        """Logger named ``pongsim.<name>``."""
        logger = self._loggers.get(name)
        if logger is None:
            logger = self._loggers[name] = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
        return logger

    def shutdown(self) -> None:
        """Flush, close and detach every handler so ``configure`` can run again."""
        if self._configured:
            self.get_logger("logging").info("Logging shut down")

        root = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in list(root.handlers):
            handler.close()
            root.removeHandler(handler)

        self._configured = False

    @property
    def is_configured(self) -> bool:
        return self._configured


_manager: Optional[LoggerManager] = None


def get_logger_manager() -> LoggerManager:
    global _manager
    if _manager is None:
        _manager = LoggerManager()
    return _manager


def get_logger(name: str) -> logging.Logger:
    """
    Get the logger for a component.

    Args:
        name: Dotted component name, e.g. "simulation.pong"
    """
    return get_logger_manager().get_logger(name)


def configure_logging(log_level: Optional[str] = None, **kwargs) -> None:
    """
    Configure logging with defaults taken from the settings.

    File output is off in development mode unless asked for explicitly.

    Args:
        log_level: Minimum level, the configured ``app.loglevel`` when None
        **kwargs: Passed on to ``LoggerManager.configure``
    """
    # Imported here because the config package logs through this module
    from ..config import get_settings

    settings = get_settings()
    kwargs.setdefault("console_output", True)
    kwargs.setdefault("file_output", not settings.is_development_mode())

    get_logger_manager().configure(log_level=log_level or settings.log_level, **kwargs)


def shutdown_logging() -> None:
    get_logger_manager().shutdown()
