"""
Physics for PongSim.

This module provides the game's value types and the pure per-frame step:
- Board, ball and paddle snapshots
- Paddle movement with clamping
- Wall and paddle bounces, out-of-bounds reset
"""

from .objects import (
    Vector2D,
    PaddleSide,
    Board,
    Ball,
    Paddle,
    Snapshot,
    create_ball,
    create_paddle,
    create_initial_snapshot,
)
from .engine import (
    SimulationCore,
    StepEvent,
    VALID_DIRECTIONS,
    advance,
    advance_with_events,
    clamp,
    within,
    out_of_bounds,
    update_paddle,
    update_ball,
)

__all__ = [
    # Value types
    "Vector2D",
    "PaddleSide",
    "Board",
    "Ball",
    "Paddle",
    "Snapshot",

    # Factory functions
    "create_ball",
    "create_paddle",
    "create_initial_snapshot",

    # Step
    "SimulationCore",
    "StepEvent",
    "VALID_DIRECTIONS",
    "advance",
    "advance_with_events",
    "clamp",
    "within",
    "out_of_bounds",
    "update_paddle",
    "update_ball",
]
