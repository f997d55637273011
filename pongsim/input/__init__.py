"""
Input handling: held-key tracking and paddle directions
"""

from .keyboard import (
    Key,
    KeyBinding,
    KeyboardInputProvider,
    DEFAULT_BINDINGS,
    bindings_from_settings,
    direction_for,
)

__all__ = [
    "Key",
    "KeyBinding",
    "KeyboardInputProvider",
    "DEFAULT_BINDINGS",
    "bindings_from_settings",
    "direction_for",
]
