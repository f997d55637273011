"""
Draws a game snapshot.

The renderer only reads the snapshot it is given and never calls back into
the physics step.
"""

from typing import Optional

from .engine import Color, RenderEngine, StandardColors
from ..config import Settings, get_settings
from ..core.logging import get_logger
from ..physics import Board, Paddle, Snapshot, Vector2D


class SnapshotRenderer:
    """Renders the board, the ball and both paddles."""

    def __init__(self,
                 engine: RenderEngine,
                 board: Board,
                 settings: Optional[Settings] = None):
        """
        Initialize the snapshot renderer.

        Args:
            engine: Initialized rendering engine to draw with
            board: Board whose bounds are drawn
            settings: Colors and options, global settings when None
        """
        self.engine = engine
        self.board = board
        self.logger = get_logger("rendering.scene")

        settings = settings or get_settings()
        self.background = self._parse_color(settings.background_color, StandardColors.BLACK)
        self.foreground = self._parse_color(settings.foreground_color, StandardColors.WHITE)
        self.center_line = settings.draw_center_line

        self.engine.set_background_color(self.background)

    def _parse_color(self, value: str, fallback: Color) -> Color:
        try:
            return Color.from_hex(value)
        except ValueError:
            self.logger.warning("Invalid color in settings, using default", extra={
                "value": value
            })
            return fallback

    def render(self, snapshot: Snapshot, status_text: Optional[str] = None) -> None:
        """Draw one frame for ``snapshot``."""
        self.engine.begin_frame()
        self.engine.clear()

        if self.center_line:
            mid_x = self.board.width / 2
            self.engine.draw_line(
                Vector2D(mid_x, 0),
                Vector2D(mid_x, self.board.height),
                StandardColors.DARK_GRAY
            )

        self._draw_paddle(snapshot.paddle_left)
        self._draw_paddle(snapshot.paddle_right)

        ball = snapshot.ball
        self.engine.draw_circle(ball.position, ball.radius, self.foreground)

        if status_text:
            self.engine.draw_text(status_text, Vector2D(8, 8), StandardColors.YELLOW, font_size=18)

        self.engine.end_frame()

    def _draw_paddle(self, paddle: Paddle) -> None:
        self.engine.draw_rectangle(
            Vector2D(paddle.x, paddle.y),
            paddle.width,
            paddle.height,
            self.foreground
        )
