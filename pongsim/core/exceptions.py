"""
Errors raised by PongSim and the handler that reports them.

Every PongSim error carries a severity, a stable error code (the class
name unless given) and a context dict that ends up in the structured log.
"""

import sys
import traceback
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type

ErrorCallback = Callable[[Exception, Dict[str, Any]], None]
CrashHandler = Callable[[BaseException], None]


class ErrorSeverity(Enum):
    """How bad an error is; HIGH and CRITICAL are logged as errors, the rest as warnings."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class PongSimError(Exception):
    """Root of the PongSim error hierarchy."""

    default_severity = ErrorSeverity.MEDIUM

    def __init__(self,
                 message: str,
                 error_code: Optional[str] = None,
                 severity: Optional[ErrorSeverity] = None,
                 context: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        """
        Args:
            message: What went wrong, for humans
            error_code: Stable identifier, the class name when None
            severity: Overrides the class's default severity
            context: Values describing the failing operation
            cause: Exception this one was raised from
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or type(self).__name__
        self.severity = severity or self.default_severity
        self.context: Dict[str, Any] = dict(context or {})
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "context": dict(self.context),
            "cause": None if self.cause is None else str(self.cause),
        }

    def __str__(self) -> str:
        text = f"{self.error_code}: {self.message}"
        if self.context:
            text += " | Context: " + ", ".join(f"{k}={v}" for k, v in self.context.items())
        if self.cause is not None:
            text += f" | Caused by: {self.cause}"
        return text


def _context_with(kwargs: Dict[str, Any], **values: Any) -> Dict[str, Any]:
    """Merge non-None ``values`` into the ``context`` keyword argument."""
    context = dict(kwargs.pop("context", None) or {})
    context.update({k: v for k, v in values.items() if v is not None})
    return context


class ConfigurationError(PongSimError):
    """A configuration value or file could not be used."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        context = _context_with(kwargs, config_key=config_key)
        super().__init__(message, context=context, **kwargs)


class InvalidConfigValueError(ConfigurationError):
    """A value is outside what its setting or object accepts."""

    def __init__(self, key: str, value: Any, expected: str, **kwargs):
        super().__init__(
            f"Invalid value '{value}' for '{key}', expected {expected}",
            config_key=key,
            **kwargs
        )


class InputError(PongSimError):
    pass


class InputMappingError(InputError):
    """A key binding names an unknown key or binds one key to both directions."""

    def __init__(self, message: str, key_name: Optional[str] = None, **kwargs):
        context = _context_with(kwargs, key_name=key_name)
        super().__init__(message, context=context, **kwargs)


class SimulationError(PongSimError):
    pass


class SimulationStateError(SimulationError):
    """The game loop was asked to do something its current state does not allow."""


class InvalidStepInputError(SimulationError):
    """The physics step got a negative delta or a direction outside -1, 0, 1."""

    default_severity = ErrorSeverity.HIGH


class RenderingError(PongSimError):
    pass


class ErrorHandler:
    """
    Central place errors are reported to.

    ``handle_error`` logs an error with its context and passes it to the
    registered callbacks. ``handle_crash`` is for errors that end the
    process. A failing callback is logged and never masks the original error.
    """

    def __init__(self):
        self._error_callbacks: List[ErrorCallback] = []
        self._crash_handlers: List[CrashHandler] = []

    def register_error_callback(self, callback: ErrorCallback) -> None:
        self._error_callbacks.append(callback)

    def register_crash_handler(self, handler: CrashHandler) -> None:
        self._crash_handlers.append(handler)

    def handle_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Log an error and notify the callbacks.

        Args:
            error: The exception to report
            context: Extra values describing where it happened
        """
        # Deferred: logging is configured from settings, which import this module
        from .logging import get_logger
        logger = get_logger("error_handler")

        report = self._describe(error)
        report.update(context or {})

        if not isinstance(error, PongSimError):
            report["traceback"] = _format_traceback(error)
            logger.error("Unexpected error", extra=report)
        elif error.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL):
            logger.error("PongSim error", extra=report)
        else:
            logger.warning("PongSim error", extra=report)

        for callback in self._error_callbacks:
            try:
                callback(error, report)
            except Exception as callback_error:
                logger.error("Error callback failed", extra={"error": str(callback_error)})

    def handle_crash(self, error: BaseException) -> None:
        """Log an error that is about to terminate the application and run the crash handlers."""
        from .logging import get_logger
        logger = get_logger("crash_handler")

        report = self._describe(error)
        report["traceback"] = _format_traceback(error)
        logger.critical("Application terminating", extra=report)

        for handler in self._crash_handlers:
            try:
                handler(error)
            except Exception as handler_error:
                logger.critical("Crash handler failed", extra={"error": str(handler_error)})

    def setup_global_exception_handler(self) -> None:
        """Route uncaught exceptions, except Ctrl-C, through ``handle_crash``."""
        def excepthook(exc_type: Type[BaseException], exc_value: BaseException, exc_tb) -> None:
            if not issubclass(exc_type, KeyboardInterrupt):
                self.handle_crash(exc_value)
            sys.__excepthook__(exc_type, exc_value, exc_tb)

        sys.excepthook = excepthook

    @staticmethod
    def _describe(error: BaseException) -> Dict[str, Any]:
        report = {
            "error_type": type(error).__name__,
            "error_message": str(error),
        }
        if isinstance(error, PongSimError):
            report["error_code"] = error.error_code
            report["severity"] = error.severity.value
            report["error_context"] = dict(error.context)
        return report


def _format_traceback(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """The process-wide error handler."""
    global _error_handler
    if _error_handler is None:
        _error_handler = ErrorHandler()
    return _error_handler


def reset_error_handler() -> None:
    global _error_handler
    _error_handler = None


def handle_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    get_error_handler().handle_error(error, context)


def handle_crash(error: BaseException) -> None:
    get_error_handler().handle_crash(error)


def setup_exception_handling() -> None:
    """Install the global handler's ``sys.excepthook``."""
    get_error_handler().setup_global_exception_handler()
