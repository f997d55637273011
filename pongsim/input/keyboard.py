"""
Keyboard input for PongSim.

Tracks which keys are currently held and turns them into a paddle direction
through configurable per-side key bindings. Keys are identified by name
("w", "up", ...) through the ``Key`` enumeration, never by raw key codes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set

import pygame

from ..config import Settings, get_settings
from ..core.logging import get_logger
from ..core.exceptions import InputMappingError
from ..physics import PaddleSide


class Key(Enum):
    """Keys that can be bound to paddle movement."""
    A = "a"
    B = "b"
    C = "c"
    D = "d"
    E = "e"
    F = "f"
    G = "g"
    H = "h"
    I = "i"
    J = "j"
    K = "k"
    L = "l"
    M = "m"
    N = "n"
    O = "o"
    P = "p"
    Q = "q"
    R = "r"
    S = "s"
    T = "t"
    U = "u"
    V = "v"
    W = "w"
    X = "x"
    Y = "y"
    Z = "z"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    RETURN = "return"
    TAB = "tab"
    LSHIFT = "lshift"
    RSHIFT = "rshift"

    @property
    def pygame_code(self) -> int:
        """pygame key constant for this key."""
        suffix = self.value if len(self.value) == 1 else self.value.upper()
        return getattr(pygame, f"K_{suffix}")

    @classmethod
    def from_name(cls, name: str) -> 'Key':
        """
        Look up a key by name.

        Raises:
            InputMappingError: If the name is not a known key
        """
        try:
            return cls(name.lower())
        except (ValueError, AttributeError):
            raise InputMappingError(f"Unknown key name '{name}'", key_name=str(name)) from None

    @classmethod
    def from_pygame(cls, code: int) -> Optional['Key']:
        """Key for a pygame key code, or None when the key is not enumerated."""
        if not _PYGAME_LOOKUP:
            _PYGAME_LOOKUP.update({key.pygame_code: key for key in cls})
        return _PYGAME_LOOKUP.get(code)


_PYGAME_LOOKUP: Dict[int, Key] = {}


@dataclass(frozen=True)
class KeyBinding:
    """Up and down key names for one paddle."""
    up_key: str
    down_key: str

    def __post_init__(self):
        up = Key.from_name(self.up_key)
        down = Key.from_name(self.down_key)
        if up == down:
            raise InputMappingError(
                f"Up and down are both bound to '{up.value}'", key_name=up.value
            )
        # Normalize to the canonical lower-case names
        object.__setattr__(self, "up_key", up.value)
        object.__setattr__(self, "down_key", down.value)

    def direction(self, held_keys: Iterable[str]) -> int:
        """-1 for up, 1 for down, 0 when neither or both are held."""
        held = held_keys if isinstance(held_keys, (set, frozenset)) else set(held_keys)
        up = self.up_key in held
        down = self.down_key in held
        if up and not down:
            return -1
        if down and not up:
            return 1
        return 0


DEFAULT_BINDINGS: Dict[PaddleSide, KeyBinding] = {
    PaddleSide.LEFT: KeyBinding(Key.W.value, Key.S.value),
    PaddleSide.RIGHT: KeyBinding(Key.UP.value, Key.DOWN.value),
}


def bindings_from_settings(settings: Optional[Settings] = None) -> Dict[PaddleSide, KeyBinding]:
    """
    Build the per-side key bindings from configuration.

    Raises:
        InputMappingError: If a configured key is unknown, or a side binds
            the same key to up and down
    """
    settings = settings or get_settings()
    bindings = {}
    for side in PaddleSide:
        up, down = settings.key_names(side.value)
        try:
            bindings[side] = KeyBinding(up, down)
        except InputMappingError as e:
            e.context["side"] = side.value
            raise
    return bindings


def direction_for(side: PaddleSide,
                  held_keys: Iterable[str],
                  bindings: Optional[Dict[PaddleSide, KeyBinding]] = None) -> int:
    """
    Direction a paddle should move given the held keys.

    Args:
        side: Which paddle
        held_keys: Names of the keys currently held
        bindings: Per-side bindings, DEFAULT_BINDINGS when None

    Returns:
        -1 (up), 0 or 1 (down)
    """
    binding = (bindings or DEFAULT_BINDINGS)[side]
    return binding.direction(held_keys)


class KeyboardInputProvider:
    """
    Owner of the held-key state.

    Fed with pygame KEYDOWN/KEYUP events (or direct press/release calls);
    everyone else only reads ``held_keys`` or asks for a direction.
    """

    def __init__(self, bindings: Optional[Dict[PaddleSide, KeyBinding]] = None):
        """
        Initialize the provider.

        Args:
            bindings: Per-side bindings, DEFAULT_BINDINGS when None
        """
        self.logger = get_logger("input.keyboard")
        self.bindings = dict(bindings or DEFAULT_BINDINGS)
        self._held: Set[str] = set()
        self._callbacks: List[Callable[[str, bool], None]] = []
        self.events_processed = 0

        self.logger.debug("KeyboardInputProvider created", extra={
            side.value: f"{b.up_key}/{b.down_key}" for side, b in self.bindings.items()
        })

    @property
    def held_keys(self) -> FrozenSet[str]:
        """Names of the keys currently held."""
        return frozenset(self._held)

    def press(self, key_name: str) -> None:
        name = key_name.lower()
        if name not in self._held:
            self._held.add(name)
            self._notify(name, True)

    def release(self, key_name: str) -> None:
        name = key_name.lower()
        if name in self._held:
            self._held.discard(name)
            self._notify(name, False)

    def clear(self) -> None:
        """Release every key, e.g. when the window loses focus."""
        for name in list(self._held):
            self.release(name)

    def handle_event(self, event: pygame.event.Event) -> bool:
        """
        Update held keys from a pygame event.

        Returns:
            True if the event was a key event for an enumerated key
        """
        if event.type not in (pygame.KEYDOWN, pygame.KEYUP):
            return False

        key = Key.from_pygame(event.key)
        if key is None:
            self.logger.debug("Ignoring unmapped key", extra={"key_code": event.key})
            return False

        self.events_processed += 1
        if event.type == pygame.KEYDOWN:
            self.press(key.value)
        else:
            self.release(key.value)
        return True

    def direction_for(self, side: PaddleSide) -> int:
        """Direction for a paddle from the current held keys."""
        return direction_for(side, self._held, self.bindings)

    def add_key_callback(self, callback: Callable[[str, bool], None]) -> None:
        """Register a callback called with (key name, pressed) on every change."""
        self._callbacks.append(callback)

    def _notify(self, name: str, pressed: bool) -> None:
        for callback in self._callbacks:
            try:
                callback(name, pressed)
            except Exception as e:
                self.logger.error("Error in key callback", extra={"error": str(e)})
