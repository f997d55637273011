"""
Rendering engines.

``RenderEngine`` is the drawing interface the game talks to; ``Renderer2D``
implements it on a pygame window. Positions are board pixels with the origin
top-left, which is pygame's screen convention too, so no axis flip is needed.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

import pygame
from pygame import Rect, Surface

from ..physics import Vector2D
from ..config import get_settings
from ..core.logging import get_logger


class RenderEngineType(Enum):
    """Available rendering engines."""
    RENDERER_2D = "renderer_2d"


def _channel(value: int) -> int:
    return max(0, min(255, int(value)))


@dataclass
class Color:
    """RGBA color; channels are clamped to 0-255."""
    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self):
        self.r, self.g, self.b, self.a = (_channel(c) for c in (self.r, self.g, self.b, self.a))

    def to_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_tuple_rgba(self) -> Tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    @classmethod
    def from_hex(cls, hex_color: str) -> 'Color':
        """
        Parse "#rrggbb" or "#rrggbbaa" (the "#" is optional).

        Raises:
            ValueError: If the string is not 6 or 8 hex digits
        """
        digits = hex_color.lstrip('#')
        if len(digits) not in (6, 8):
            raise ValueError(f"Invalid hex color: {hex_color!r}")
        try:
            return cls(*(int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)))
        except ValueError:
            raise ValueError(f"Invalid hex color: {hex_color!r}") from None


class StandardColors:
    """Named colors used by the game."""

    BLACK = Color(0, 0, 0)
    WHITE = Color(255, 255, 255)
    GRAY = Color(128, 128, 128)
    DARK_GRAY = Color(64, 64, 64)
    YELLOW = Color(255, 255, 0)


@dataclass
class RenderStats:
    """Frame counters kept by an engine."""
    frame_count: int = 0
    draw_calls: int = 0
    last_frame_ms: float = 0.0
    average_frame_ms: float = 0.0

    def record_frame(self, frame_ms: float, draw_calls: int) -> None:
        self.frame_count += 1
        self.draw_calls += draw_calls
        self.last_frame_ms = frame_ms
        # Running mean, no history kept
        self.average_frame_ms += (frame_ms - self.average_frame_ms) / self.frame_count


@dataclass
class Viewport:
    """Window area the board is drawn into."""
    x: int = 0
    y: int = 0
    width: int = 500
    height: int = 300

    def get_rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


class RenderEngine(ABC):
    """
    Drawing interface used by the game.

    Implementations ignore drawing calls until ``initialize`` has succeeded.
    """

    def __init__(self):
        self.logger = get_logger("rendering.engine")
        self.settings = get_settings()

        self._initialized = False
        self._viewport = Viewport()
        self._background_color = StandardColors.BLACK
        self._stats = RenderStats()

    @abstractmethod
    def initialize(self, width: int = 500, height: int = 300, title: str = "PongSim") -> bool:
        """
        Open the output surface.

        Returns:
            True if the engine is ready to draw
        """

    @abstractmethod
    def shutdown(self) -> None:
        """Release the output surface."""

    @abstractmethod
    def begin_frame(self) -> None:
        pass

    @abstractmethod
    def end_frame(self) -> None:
        """Present the frame."""

    @abstractmethod
    def clear(self, color: Optional[Color] = None) -> None:
        """Fill the surface, with the background color when ``color`` is None."""

    @abstractmethod
    def draw_circle(self, center: Vector2D, radius: float, color: Color) -> None:
        """Filled circle centred on ``center``."""

    @abstractmethod
    def draw_rectangle(self,
                       position: Vector2D,
                       width: float,
                       height: float,
                       color: Color) -> None:
        """Filled rectangle whose top-left corner is ``position``."""

    @abstractmethod
    def draw_line(self, start: Vector2D, end: Vector2D, color: Color, width: int = 1) -> None:
        pass

    @abstractmethod
    def draw_text(self,
                  text: str,
                  position: Vector2D,
                  color: Color,
                  font_size: int = 16) -> None:
        """Text with its top-left corner at ``position``."""

    def get_viewport(self) -> Viewport:
        return self._viewport

    def set_background_color(self, color: Color) -> None:
        self._background_color = color

    def get_background_color(self) -> Color:
        return self._background_color

    def get_stats(self) -> RenderStats:
        return self._stats

    def is_initialized(self) -> bool:
        return self._initialized


def _point(vector: Vector2D) -> Tuple[int, int]:
    return (int(round(vector.x)), int(round(vector.y)))


class Renderer2D(RenderEngine):
    """pygame window renderer. The frame rate is capped in ``end_frame``."""

    def __init__(self):
        super().__init__()

        self._screen: Optional[Surface] = None
        self._clock: Optional[pygame.time.Clock] = None
        self._fonts: Dict[int, pygame.font.Font] = {}
        self._frame_started = 0.0
        self._frame_draw_calls = 0

    def initialize(self, width: int = 500, height: int = 300, title: str = "PongSim") -> bool:
        if self._initialized:
            self.logger.warning("Renderer2D already initialized")
            return True

        try:
            pygame.init()
            pygame.display.set_caption(title)
            self._screen = pygame.display.set_mode((width, height))
            self._clock = pygame.time.Clock()
            pygame.font.init()
        except pygame.error as e:
            self.logger.error("Could not open the game window", extra={
                "width": width,
                "height": height,
                "error": str(e),
            })
            return False

        self._viewport = Viewport(0, 0, width, height)
        self._initialized = True
        self.logger.info("Renderer2D initialized", extra={
            "width": width,
            "height": height,
            "title": title,
        })
        return True

    def shutdown(self) -> None:
        if not self._initialized:
            return

        self._fonts.clear()
        try:
            pygame.font.quit()
            pygame.display.quit()
            pygame.quit()
        except pygame.error as e:
            self.logger.warning("pygame did not shut down cleanly", extra={"error": str(e)})

        self._screen = None
        self._clock = None
        self._initialized = False
        self.logger.info("Renderer2D shut down", extra={"frames": self._stats.frame_count})

    def _surface(self) -> Optional[Surface]:
        """The window surface, or None while drawing is disabled."""
        return self._screen if self._initialized else None

    def begin_frame(self) -> None:
        self._frame_started = time.perf_counter()
        self._frame_draw_calls = 0

    def end_frame(self) -> None:
        if self._surface() is None:
            return

        pygame.display.flip()
        if self._clock is not None:
            self._clock.tick(self.settings.target_fps)

        frame_ms = (time.perf_counter() - self._frame_started) * 1000.0
        self._stats.record_frame(frame_ms, self._frame_draw_calls)

    def clear(self, color: Optional[Color] = None) -> None:
        screen = self._surface()
        if screen is not None:
            screen.fill((color or self._background_color).to_tuple())

    def draw_circle(self, center: Vector2D, radius: float, color: Color) -> None:
        screen = self._surface()
        if screen is None:
            return
        pygame.draw.circle(screen, color.to_tuple(), _point(center), max(1, int(round(radius))))
        self._frame_draw_calls += 1

    def draw_rectangle(self,
                       position: Vector2D,
                       width: float,
                       height: float,
                       color: Color) -> None:
        screen = self._surface()
        if screen is None:
            return
        x, y = _point(position)
        rect = Rect(x, y, max(1, int(round(width))), max(1, int(round(height))))
        pygame.draw.rect(screen, color.to_tuple(), rect)
        self._frame_draw_calls += 1

    def draw_line(self, start: Vector2D, end: Vector2D, color: Color, width: int = 1) -> None:
        screen = self._surface()
        if screen is None:
            return
        pygame.draw.line(screen, color.to_tuple(), _point(start), _point(end), width)
        self._frame_draw_calls += 1

    def draw_text(self,
                  text: str,
                  position: Vector2D,
                  color: Color,
                  font_size: int = 16) -> None:
        screen = self._surface()
        if screen is None:
            return
        font = self._fonts.get(font_size)
        if font is None:
            font = self._fonts[font_size] = pygame.font.Font(None, font_size)
        screen.blit(font.render(text, True, color.to_tuple()), _point(position))
        self._frame_draw_calls += 1

    def get_screen_size(self) -> Tuple[int, int]:
        return (self._viewport.width, self._viewport.height)


_render_engine: Optional[RenderEngine] = None


def get_render_engine() -> Optional[RenderEngine]:
    """The engine created by the last ``create_render_engine`` call."""
    return _render_engine


def create_render_engine(engine_type: RenderEngineType) -> RenderEngine:
    """
    Create the global rendering engine.

    Raises:
        ValueError: If the engine type is not supported
    """
    global _render_engine

    if engine_type != RenderEngineType.RENDERER_2D:
        raise ValueError(f"Unsupported rendering engine type: {engine_type}")

    _render_engine = Renderer2D()
    return _render_engine


def reset_render_engine() -> None:
    """Shut down and forget the global rendering engine."""
    global _render_engine
    if _render_engine is not None and _render_engine.is_initialized():
        _render_engine.shutdown()
    _render_engine = None
