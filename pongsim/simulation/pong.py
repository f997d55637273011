"""
The Pong game loop.

Each frame samples both paddle directions from the input provider, runs
the physics step on the current snapshot and swaps in the result. The
renderer reads the snapshot afterwards.
"""

from typing import Optional

import pygame

from .base import BaseSimulation, SimulationConfig, SimulationState
from .clock import FrameClock
from ..config import Settings, get_settings
from ..input import KeyboardInputProvider, bindings_from_settings
from ..physics import (
    Board, PaddleSide, SimulationCore, Snapshot, create_initial_snapshot
)
from ..rendering import RenderEngine, SnapshotRenderer


class PongSimulation(BaseSimulation):
    """Two-paddle Pong driven by the frame clock."""

    def __init__(self,
                 board: Optional[Board] = None,
                 settings: Optional[Settings] = None,
                 input_provider: Optional[KeyboardInputProvider] = None,
                 render_engine: Optional[RenderEngine] = None,
                 config: Optional[SimulationConfig] = None,
                 clock: Optional[FrameClock] = None):
        """
        Initialize the game.

        Args:
            board: Playing field, sized from settings when None
            settings: Settings for geometry, speeds and key bindings
            input_provider: Held-key provider, built from the configured
                bindings when None
            render_engine: Engine to draw with (see BaseSimulation)
            config: Loop configuration, derived from settings when None
            clock: Frame clock
        """
        self.settings = settings or get_settings()
        self.board = board or Board(*self.settings.board_size)

        if config is None:
            config = SimulationConfig(
                target_fps=self.settings.target_fps,
                max_frame_delta=self.settings.max_frame_delta,
                window_width=int(self.board.width),
                window_height=int(self.board.height),
                window_title=self.settings.app_name,
            )

        super().__init__("Pong", config, render_engine, clock)

        self.core = SimulationCore(self.board)
        self.input = input_provider or KeyboardInputProvider(bindings_from_settings(self.settings))
        self.initial_snapshot = create_initial_snapshot(self.board, self.settings)
        self.snapshot = self.initial_snapshot
        self.scene: Optional[SnapshotRenderer] = None

    def step(self, delta: float) -> Snapshot:
        """
        Advance the game by one frame.

        Does nothing while paused.

        Args:
            delta: Milliseconds since the previous frame

        Returns:
            The snapshot now held by the game
        """
        if self.state == SimulationState.PAUSED:
            return self.snapshot

        left = self.input.direction_for(PaddleSide.LEFT)
        right = self.input.direction_for(PaddleSide.RIGHT)

        self.snapshot, events = self.core.advance_with_events(delta, left, right, self.snapshot)

        self.stats.record_frame(delta)
        self.stats.record_events(events)

        for event in events:
            self.logger.debug("Step event", extra={
                "event": event.value,
                "frame": self.stats.frame_count,
                "ball_x": round(self.snapshot.ball.x, 2),
                "ball_y": round(self.snapshot.ball.y, 2),
            })

        return self.snapshot

    def run_headless(self, frames: int, delta: Optional[float] = None) -> Snapshot:
        """
        Step the game a fixed number of frames without a window.

        Args:
            frames: Number of frames to simulate
            delta: Fixed frame delta, the configured headless delta when None
        """
        delta = self.settings.headless_frame_delta if delta is None else delta
        for _ in range(frames):
            self.step(delta)

        self.logger.info("Headless run finished", extra={
            "frames": frames,
            "delta": delta,
            "events": dict(self.stats.event_counts)
        })
        return self.snapshot

    def reset(self) -> None:
        """Put the ball and paddles back in their starting positions."""
        self.snapshot = self.initial_snapshot
        self.input.clear()
        self.logger.info("Game reset")

    def on_initialize(self) -> bool:
        if self.render_engine is not None:
            self.scene = SnapshotRenderer(self.render_engine, self.board, self.settings)
        return True

    def on_start(self) -> None:
        self.logger.info("Game started", extra={
            **self.settings.get_board_info(),
            "left_keys": "/".join((self.input.bindings[PaddleSide.LEFT].up_key,
                                   self.input.bindings[PaddleSide.LEFT].down_key)),
            "right_keys": "/".join((self.input.bindings[PaddleSide.RIGHT].up_key,
                                    self.input.bindings[PaddleSide.RIGHT].down_key)),
        })

    def on_update(self, delta: float) -> None:
        self.step(delta)

    def on_render(self, renderer: RenderEngine) -> None:
        if self.scene is None:
            return
        self.scene.render(self.snapshot, "PAUSED" if self.is_paused else None)

    def on_event(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.KEYDOWN and event.key == pygame.K_BACKSPACE:
            self.reset()
            return True

        if event.type == getattr(pygame, "WINDOWFOCUSLOST", None):
            # Key-up events are not delivered to an unfocused window
            self.input.clear()
            return True

        self.input.handle_event(event)
        return True

    def on_shutdown(self) -> None:
        self.input.clear()
