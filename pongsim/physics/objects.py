"""
Physics objects for PongSim.

Board, ball and paddles are immutable values. A ``Snapshot`` bundles the
ball and both paddles; each physics step returns a new snapshot built with
``dataclasses.replace`` instead of mutating the previous one.

Coordinates are board pixels with the origin in the top-left corner and y
growing downwards. Velocities are pixels per millisecond.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

from ..core.exceptions import InvalidConfigValueError

if TYPE_CHECKING:
    from ..config import Settings


@dataclass(frozen=True)
class Vector2D:
    """2D vector used by the rendering side."""
    x: float
    y: float

    def __add__(self, other: 'Vector2D') -> 'Vector2D':
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Vector2D') -> 'Vector2D':
        return Vector2D(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> 'Vector2D':
        return Vector2D(self.x * scalar, self.y * scalar)

    def to_tuple(self) -> Tuple[float, float]:
        """Convert to tuple."""
        return (self.x, self.y)


class PaddleSide(Enum):
    """Which player a paddle belongs to."""
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Board:
    """Fixed-size playing field."""
    width: float = 500
    height: float = 300

    def __post_init__(self):
        if self.width <= 0:
            raise InvalidConfigValueError("board.width", self.width, "a positive number")
        if self.height <= 0:
            raise InvalidConfigValueError("board.height", self.height, "a positive number")

    @property
    def center(self) -> Tuple[float, float]:
        """Centre point of the board."""
        return (self.width / 2, self.height / 2)


@dataclass(frozen=True)
class Ball:
    """
    Ball state.

    The position may leave the board horizontally for one frame; that
    excursion is what triggers the reset to the centre.
    """
    x: float
    y: float
    vx: float
    vy: float
    radius: float = 8.0

    def __post_init__(self):
        if self.radius <= 0:
            raise InvalidConfigValueError("ball.radius", self.radius, "a positive number")

    @property
    def position(self) -> Vector2D:
        return Vector2D(self.x, self.y)

    def with_position(self, x: float, y: float) -> 'Ball':
        """Copy of the ball moved to (x, y)."""
        return replace(self, x=x, y=y)

    def with_velocity(self, vx: float, vy: float) -> 'Ball':
        """Copy of the ball with a new velocity."""
        return replace(self, vx=vx, vy=vy)


@dataclass(frozen=True)
class Paddle:
    """
    Paddle state.

    (x, y) is the top-left corner. ``vy`` is the movement speed; ``vx`` is
    carried along but never used.
    """
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.3
    width: float = 5.0
    height: float = 80.0

    def __post_init__(self):
        if self.width <= 0:
            raise InvalidConfigValueError("paddle.width", self.width, "a positive number")
        if self.height <= 0:
            raise InvalidConfigValueError("paddle.height", self.height, "a positive number")

    @property
    def center(self) -> Tuple[float, float]:
        """Centre point of the paddle."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def with_y(self, y: float) -> 'Paddle':
        """Copy of the paddle moved vertically to y."""
        return replace(self, y=y)


@dataclass(frozen=True)
class Snapshot:
    """Complete state of the ball and both paddles at one point in time."""
    ball: Ball
    paddle_left: Paddle
    paddle_right: Paddle

    def paddle(self, side: PaddleSide) -> Paddle:
        return self.paddle_left if side == PaddleSide.LEFT else self.paddle_right


def create_ball(board: Board,
                velocity: Tuple[float, float] = (0.3, 0.2),
                radius: float = 8.0) -> Ball:
    """
    Create a ball at the centre of the board.

    Args:
        board: Board the ball plays on
        velocity: Initial (vx, vy)
        radius: Ball radius
    """
    cx, cy = board.center
    return Ball(cx, cy, velocity[0], velocity[1], radius)


def create_paddle(board: Board,
                  side: PaddleSide,
                  width: float = 5.0,
                  height: float = 80.0,
                  speed: float = 0.3,
                  margin: float = 20.0) -> Paddle:
    """
    Create a vertically centred paddle.

    The left paddle sits ``margin`` pixels from the left edge; the right one
    mirrors it so its right side is ``margin`` pixels from the right edge.
    """
    if side == PaddleSide.LEFT:
        x = margin
    else:
        x = board.width - margin - width
    y = (board.height - height) / 2
    return Paddle(x=x, y=y, vx=0.0, vy=speed, width=width, height=height)


def create_initial_snapshot(board: Board, settings: Optional['Settings'] = None) -> Snapshot:
    """
    Build the start-of-session snapshot.

    Args:
        board: Board to place the objects on
        settings: Settings supplying geometry and speeds; defaults when None
    """
    if settings is None:
        return Snapshot(
            ball=create_ball(board),
            paddle_left=create_paddle(board, PaddleSide.LEFT),
            paddle_right=create_paddle(board, PaddleSide.RIGHT),
        )

    paddle_kwargs = {
        "width": settings.paddle_width,
        "height": settings.paddle_height,
        "speed": settings.paddle_speed,
        "margin": settings.paddle_margin,
    }
    return Snapshot(
        ball=create_ball(board, settings.ball_velocity, settings.ball_radius),
        paddle_left=create_paddle(board, PaddleSide.LEFT, **paddle_kwargs),
        paddle_right=create_paddle(board, PaddleSide.RIGHT, **paddle_kwargs),
    )
