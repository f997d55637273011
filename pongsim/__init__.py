"""
PongSim - two-player Pong on a deterministic, pure physics step

The physics package has no pygame dependency; input, rendering and the
game loop are pygame adapters around it.
"""

__version__ = "0.1.0"

from .physics import (
    Board,
    Ball,
    Paddle,
    PaddleSide,
    Snapshot,
    SimulationCore,
    advance,
    within,
)
from .config import Config, Settings

__all__ = [
    "Board",
    "Ball",
    "Paddle",
    "PaddleSide",
    "Snapshot",
    "SimulationCore",
    "advance",
    "within",
    "Config",
    "Settings",
]
