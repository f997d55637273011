"""
Pong physics step.

``advance`` is a pure function of (board, delta, directions, snapshot): it
moves the paddles, resets a ball that left the board, bounces the ball off
walls and paddles, and moves it by its post-bounce velocity. Nothing here
logs or keeps state between calls; the game loop owns the snapshot.
"""

from enum import Enum
from typing import List, Tuple

from .objects import Ball, Board, Paddle, Snapshot
from ..core.exceptions import InvalidStepInputError


VALID_DIRECTIONS = (-1, 0, 1)


class StepEvent(Enum):
    """Things that can happen to the ball during one step."""
    PADDLE_BOUNCE_LEFT = "paddle_bounce_left"
    PADDLE_BOUNCE_RIGHT = "paddle_bounce_right"
    WALL_BOUNCE_TOP = "wall_bounce_top"
    WALL_BOUNCE_BOTTOM = "wall_bounce_bottom"
    BALL_RESET = "ball_reset"


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value to the inclusive range [low, high]."""
    return max(low, min(high, value))


def within(ball: Ball, paddle: Paddle) -> bool:
    """
    Ball-paddle proximity test.

    True when the ball centre is within ``width/2 + radius`` of the paddle
    centre horizontally and within ``height/2 + radius`` vertically. Each
    axis is tested on its own, so the zone is a rectangle, not an exact
    circle-rectangle overlap.
    """
    cx, cy = paddle.center
    return (abs(ball.x - cx) <= paddle.width / 2 + ball.radius
            and abs(ball.y - cy) <= paddle.height / 2 + ball.radius)


def out_of_bounds(board: Board, ball: Ball) -> bool:
    """True once the ball has fully left the board past either side."""
    return ball.x < -ball.radius or ball.x > board.width + ball.radius


def update_paddle(board: Board, paddle: Paddle, direction: int, delta: float) -> Paddle:
    """
    Move a paddle by ``vy * direction * delta``, keeping it fully on the board.

    The clamp applies for every direction, so a paddle that starts off the
    board is pulled back onto it.
    """
    new_y = clamp(paddle.y + paddle.vy * direction * delta, 0, board.height - paddle.height)
    return paddle.with_y(new_y)


def update_ball(board: Board,
                ball: Ball,
                paddle_left: Paddle,
                paddle_right: Paddle,
                delta: float,
                events: List[StepEvent]) -> Ball:
    """
    Reset or bounce and move the ball, appending what happened to ``events``.
    """
    if out_of_bounds(board, ball):
        events.append(StepEvent.BALL_RESET)
        cx, cy = board.center
        return ball.with_position(cx, cy)

    vx = ball.vx
    if within(ball, paddle_left):
        vx = abs(vx)
        events.append(StepEvent.PADDLE_BOUNCE_LEFT)
    elif within(ball, paddle_right):
        vx = -abs(vx)
        events.append(StepEvent.PADDLE_BOUNCE_RIGHT)

    vy = ball.vy
    if ball.y < ball.radius:
        vy = abs(vy)
        events.append(StepEvent.WALL_BOUNCE_TOP)
    elif ball.y > board.height - ball.radius:
        vy = -abs(vy)
        events.append(StepEvent.WALL_BOUNCE_BOTTOM)

    bounced = ball.with_velocity(vx, vy)
    return bounced.with_position(ball.x + vx * delta, ball.y + vy * delta)


def _validate_step_input(delta: float, left_direction: int, right_direction: int) -> None:
    if delta < 0:
        raise InvalidStepInputError(
            "Frame delta must not be negative", context={"delta": delta}
        )
    for name, direction in (("left", left_direction), ("right", right_direction)):
        if direction not in VALID_DIRECTIONS:
            raise InvalidStepInputError(
                "Paddle direction must be -1, 0 or 1",
                context={"side": name, "direction": direction}
            )


def advance_with_events(board: Board,
                        delta: float,
                        left_direction: int,
                        right_direction: int,
                        snapshot: Snapshot) -> Tuple[Snapshot, Tuple[StepEvent, ...]]:
    """
    Advance the game by one frame and report the step events.

    Args:
        board: Playing field
        delta: Milliseconds since the previous frame
        left_direction: -1 (up), 0 or 1 (down) for the left paddle
        right_direction: Same for the right paddle
        snapshot: State before the step

    Returns:
        (new snapshot, events in the order they were detected)

    Raises:
        InvalidStepInputError: If delta is negative or a direction is invalid
    """
    _validate_step_input(delta, left_direction, right_direction)

    # A null time step leaves the state exactly as it was.
    if delta == 0:
        return snapshot, ()

    paddle_left = update_paddle(board, snapshot.paddle_left, left_direction, delta)
    paddle_right = update_paddle(board, snapshot.paddle_right, right_direction, delta)

    events: List[StepEvent] = []
    ball = update_ball(board, snapshot.ball, paddle_left, paddle_right, delta, events)

    return Snapshot(ball=ball, paddle_left=paddle_left, paddle_right=paddle_right), tuple(events)


def advance(board: Board,
            delta: float,
            left_direction: int,
            right_direction: int,
            snapshot: Snapshot) -> Snapshot:
    """Advance the game by one frame. See ``advance_with_events``."""
    new_snapshot, _ = advance_with_events(board, delta, left_direction, right_direction, snapshot)
    return new_snapshot


class SimulationCore:
    """
    Physics step bound to a board.

    Holds no per-frame state; every call takes the previous snapshot and
    returns a new one.
    """

    def __init__(self, board: Board):
        self.board = board

    def advance(self,
                delta: float,
                left_direction: int,
                right_direction: int,
                snapshot: Snapshot) -> Snapshot:
        return advance(self.board, delta, left_direction, right_direction, snapshot)

    def advance_with_events(self,
                            delta: float,
                            left_direction: int,
                            right_direction: int,
                            snapshot: Snapshot) -> Tuple[Snapshot, Tuple[StepEvent, ...]]:
        return advance_with_events(self.board, delta, left_direction, right_direction, snapshot)

    def within(self, ball: Ball, paddle: Paddle) -> bool:
        return within(ball, paddle)
