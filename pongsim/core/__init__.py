"""
Core system components: logging and error handling
"""

from .logging import get_logger, configure_logging, shutdown_logging
from .exceptions import (
    PongSimError,
    ErrorSeverity,
    ConfigurationError,
    InvalidConfigValueError,
    InputError,
    InputMappingError,
    SimulationError,
    SimulationStateError,
    InvalidStepInputError,
    RenderingError,
    handle_error,
    handle_crash,
    setup_exception_handling,
)

__all__ = [
    "get_logger",
    "configure_logging",
    "shutdown_logging",
    "PongSimError",
    "ErrorSeverity",
    "ConfigurationError",
    "InvalidConfigValueError",
    "InputError",
    "InputMappingError",
    "SimulationError",
    "SimulationStateError",
    "InvalidStepInputError",
    "RenderingError",
    "handle_error",
    "handle_crash",
    "setup_exception_handling",
]
