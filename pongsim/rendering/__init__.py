"""
Rendering system for PongSim.

This module provides the pygame 2D renderer and the snapshot renderer that
draws the ball and paddles.
"""

from .engine import (
    RenderEngine,
    Renderer2D,
    RenderEngineType,
    Color,
    StandardColors,
    Viewport,
    RenderStats,
    get_render_engine,
    create_render_engine,
    reset_render_engine
)
from .scene import SnapshotRenderer

__all__ = [
    # Core rendering
    "RenderEngine",
    "Renderer2D",
    "RenderEngineType",

    # Color and styling
    "Color",
    "StandardColors",

    # Viewport and statistics
    "Viewport",
    "RenderStats",

    # Game drawing
    "SnapshotRenderer",

    # Factory functions
    "get_render_engine",
    "create_render_engine",
    "reset_render_engine",
]
