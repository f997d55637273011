"""
Typed, range-checked view of the PongSim configuration.
"""

from typing import Dict, Any, Optional, Tuple
from .config import get_config, Config


class Settings:
    """
    Typed properties over a ``Config``.

    Out-of-range values are clamped and values of the wrong type fall back
    to the default, so reading a setting never raises.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Args:
            config: Configuration to read, the global one when None
        """
        self._config = config or get_config()

    def _number(self, key: str, default: float, low: float, high: float) -> float:
        value = self._config.get(key, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        return max(low, min(value, high))

    def _string(self, key: str, default: str) -> str:
        value = self._config.get(key, default)
        return value if isinstance(value, str) and value else default

    # Application settings
    @property
    def app_name(self) -> str:
        """Application name."""
        return self._string("app.name", "PongSim")

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._string("app.version", "0.1.0")

    @property
    def debug_mode(self) -> bool:
        """Debug mode enabled."""
        return bool(self._config.get("app.debug", False))

    @property
    def log_level(self) -> str:
        """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""
        level = self._string("app.loglevel", "INFO").upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        return level if level in valid_levels else "INFO"

    @property
    def target_fps(self) -> int:
        """Target frames per second."""
        return int(self._number("app.fps", 60, 1, 240))

    # Board settings
    @property
    def board_width(self) -> int:
        """Board width in pixels."""
        return int(self._number("board.width", 500, 100, 3840))

    @property
    def board_height(self) -> int:
        """Board height in pixels."""
        return int(self._number("board.height", 300, 100, 2160))

    @property
    def board_size(self) -> Tuple[int, int]:
        """Board size as (width, height) tuple."""
        return (self.board_width, self.board_height)

    # Ball settings
    @property
    def ball_radius(self) -> float:
        """Ball radius in pixels, kept below half the board height."""
        return self._number("ball.radius", 8.0, 1.0, self.board_height / 2 - 1)

    @property
    def ball_velocity(self) -> Tuple[float, float]:
        """Initial ball velocity (vx, vy) in pixels per millisecond."""
        return (
            self._number("ball.speedx", 0.3, -5.0, 5.0),
            self._number("ball.speedy", 0.2, -5.0, 5.0),
        )

    # Paddle settings
    @property
    def paddle_width(self) -> float:
        """Paddle width in pixels."""
        return self._number("paddle.width", 5.0, 1.0, self.board_width / 4)

    @property
    def paddle_height(self) -> float:
        """Paddle height in pixels."""
        return self._number("paddle.height", 80.0, 1.0, float(self.board_height))

    @property
    def paddle_speed(self) -> float:
        """Paddle speed in pixels per millisecond."""
        return self._number("paddle.speed", 0.3, 0.0, 5.0)

    @property
    def paddle_margin(self) -> float:
        """Distance of the paddles from the board edges."""
        return self._number("paddle.margin", 20.0, 0.0, self.board_width / 4)

    # Input settings
    def key_names(self, side: str) -> Tuple[str, str]:
        """
        Configured (up, down) key names for a paddle side.

        Args:
            side: "left" or "right"
        """
        defaults = {"left": ("w", "s"), "right": ("up", "down")}[side]
        return (
            self._string(f"input.{side}.up", defaults[0]).lower(),
            self._string(f"input.{side}.down", defaults[1]).lower(),
        )

    # Simulation settings
    @property
    def max_frame_delta(self) -> float:
        """Largest delta in milliseconds handed to the physics step."""
        return self._number("simulation.maxdelta", 100.0, 1.0, 1000.0)

    @property
    def headless_frame_delta(self) -> float:
        """Fixed delta in milliseconds used by headless runs."""
        return self._number("simulation.headlessdelta", 16.0, 1.0, 100.0)

    # Rendering settings
    @property
    def background_color(self) -> str:
        """Board background color as a hex string."""
        return self._string("rendering.background", "#000000")

    @property
    def foreground_color(self) -> str:
        """Ball and paddle color as a hex string."""
        return self._string("rendering.foreground", "#ffffff")

    @property
    def draw_center_line(self) -> bool:
        """Draw the dividing line in the middle of the board."""
        return bool(self._config.get("rendering.centerline", True))

    def update_setting(self, key: str, value: Any) -> None:
        """Set a dot-separated key on the underlying configuration."""
        self._config.set(key, value)

    def is_development_mode(self) -> bool:
        """Debug flag set or DEBUG logging requested."""
        return self.debug_mode or self.log_level == "DEBUG"

    def get_board_info(self) -> Dict[str, Any]:
        """Geometry summary for log records."""
        return {
            "width": self.board_width,
            "height": self.board_height,
            "ball_radius": self.ball_radius,
            "paddle_width": self.paddle_width,
            "paddle_height": self.paddle_height,
        }


_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Settings over the global configuration, created on first use."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def set_settings(settings: Settings) -> None:
    global _settings_instance
    _settings_instance = settings


def reset_settings() -> None:
    global _settings_instance
    _settings_instance = None
