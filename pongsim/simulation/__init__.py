"""
Game loop for PongSim.

This module wires the frame clock, the input provider, the physics step
and the renderer together.
"""

from .clock import FrameClock
from .base import (
    BaseSimulation,
    SimulationConfig,
    SimulationState,
    SimulationStats
)
from .pong import PongSimulation

__all__ = [
    "FrameClock",
    "BaseSimulation",
    "SimulationConfig",
    "SimulationState",
    "SimulationStats",
    "PongSimulation",
]
