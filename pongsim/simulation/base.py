"""
Lifecycle and frame loop shared by PongSim games.

A simulation moves through UNINITIALIZED -> INITIALIZING -> READY ->
RUNNING <-> PAUSED -> STOPPING -> STOPPED, or to ERROR when setup or a
frame fails. Each frame of ``run`` polls pygame events, ticks the frame
clock, updates and renders.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional

import pygame

from .clock import FrameClock
from ..rendering import RenderEngine, RenderEngineType, create_render_engine
from ..core.logging import get_logger
from ..core.exceptions import SimulationError, SimulationStateError


class SimulationState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPING = "stopping"
    STOPPED = "stopped"
    ERROR = "error"


_ACTIVE_STATES = (SimulationState.RUNNING, SimulationState.PAUSED)


@dataclass
class SimulationConfig:
    """Window and frame-loop options."""
    target_fps: int = 60
    max_frame_delta: float = 100.0
    window_width: int = 500
    window_height: int = 300
    window_title: str = "PongSim"
    headless: bool = False


@dataclass
class SimulationStats:
    """Counters for simulated frames and step events."""
    frame_count: int = 0
    simulated_time_ms: float = 0.0
    last_delta_ms: float = 0.0
    average_delta_ms: float = 0.0
    event_counts: Dict[str, int] = field(default_factory=dict)

    def record_frame(self, delta: float) -> None:
        self.frame_count += 1
        self.simulated_time_ms += delta
        self.last_delta_ms = delta
        self.average_delta_ms = self.simulated_time_ms / self.frame_count

    def record_events(self, events: Iterable[Enum]) -> None:
        for event in events:
            self.event_counts[event.value] = self.event_counts.get(event.value, 0) + 1


class BaseSimulation(ABC):
    """
    Owns the state machine, the frame clock and the pygame event loop.

    Subclasses fill in ``on_initialize``, ``on_update`` and ``on_render``,
    and may override ``on_start``, ``on_event`` and ``on_shutdown``. The
    loop handles QUIT and Escape (stop) and Space (pause) itself.
    """

    def __init__(self,
                 name: str = "Simulation",
                 config: Optional[SimulationConfig] = None,
                 render_engine: Optional[RenderEngine] = None,
                 clock: Optional[FrameClock] = None):
        """
        Args:
            name: Used in log records
            config: Loop options, defaults when None
            render_engine: Engine to draw with; without one a pygame
                Renderer2D is created by ``initialize`` unless headless
            clock: Frame clock, a wall-clock ``FrameClock`` when None
        """
        self.name = name
        self.config = config or SimulationConfig()
        self.logger = get_logger(f"simulation.{name.lower()}")

        self.state = SimulationState.UNINITIALIZED
        self.stats = SimulationStats()
        self.start_time = 0.0

        self.render_engine = render_engine
        self.clock = clock or FrameClock(self.config.max_frame_delta)

        self.logger.debug("Simulation created", extra={
            "simulation": name,
            "config": asdict(self.config),
        })

    def initialize(self) -> bool:
        """
        Open the window (unless headless) and run ``on_initialize``.

        Returns:
            True once READY; False after moving to ERROR
        """
        if self.state != SimulationState.UNINITIALIZED:
            self.logger.warning("Initialize called twice", extra={"state": self.state.value})
            return self.state != SimulationState.ERROR

        self.state = SimulationState.INITIALIZING
        try:
            if not self.config.headless:
                self._open_window()
            if not self.on_initialize():
                raise SimulationError(f"{self.name} setup failed")
        except SimulationError as e:
            self.state = SimulationState.ERROR
            self.logger.error("Initialization failed", extra={
                "simulation": self.name,
                "error": str(e),
            })
            return False

        self.state = SimulationState.READY
        self.logger.info("Simulation ready", extra={"simulation": self.name})
        return True

    def _open_window(self) -> None:
        if self.render_engine is None:
            self.render_engine = create_render_engine(RenderEngineType.RENDERER_2D)

        opened = self.render_engine.initialize(
            self.config.window_width,
            self.config.window_height,
            self.config.window_title
        )
        if not opened:
            raise SimulationError("Could not open the game window")

    def run(self, max_frames: Optional[int] = None) -> None:
        """
        Run frames until stopped, quit, or ``max_frames`` frames have run.

        Raises:
            SimulationStateError: If the simulation cannot reach READY
        """
        if self.state == SimulationState.UNINITIALIZED:
            self.initialize()
        if self.state != SimulationState.READY:
            raise SimulationStateError("Cannot run simulation", context={"state": self.state.value})

        self.state = SimulationState.RUNNING
        self.start_time = time.time()
        self.clock.reset()
        self.on_start()
        self.logger.info("Simulation running", extra={"simulation": self.name, "max_frames": max_frames})

        frames = 0
        try:
            while self.state in _ACTIVE_STATES and self._handle_events():
                self._update(self.clock.tick())
                self._render()

                frames += 1
                if max_frames is not None and frames >= max_frames:
                    self.stop()
        except KeyboardInterrupt:
            self.logger.info("Interrupted by user", extra={"simulation": self.name})
        except Exception as e:
            self.state = SimulationState.ERROR
            self.logger.error("Frame failed", extra={
                "simulation": self.name,
                "frame": frames,
                "error": str(e),
                "error_type": type(e).__name__,
            })
            raise
        finally:
            self._shutdown()

    def stop(self) -> None:
        if self.state in _ACTIVE_STATES:
            self.state = SimulationState.STOPPING
            self.logger.info("Stop requested", extra={"simulation": self.name})

    def pause(self) -> None:
        if self.state == SimulationState.RUNNING:
            self.state = SimulationState.PAUSED
            self.logger.info("Paused", extra={"simulation": self.name})

    def resume(self) -> None:
        if self.state == SimulationState.PAUSED:
            self.state = SimulationState.RUNNING
            self.logger.info("Resumed", extra={"simulation": self.name})

    def toggle_pause(self) -> None:
        if self.is_paused:
            self.resume()
        else:
            self.pause()

    @property
    def is_paused(self) -> bool:
        return self.state == SimulationState.PAUSED

    def _update(self, delta: float) -> None:
        if self.state == SimulationState.RUNNING:
            self.on_update(delta)

    def _render(self) -> None:
        if self.render_engine is not None and self.render_engine.is_initialized():
            self.on_render(self.render_engine)

    def _handle_events(self) -> bool:
        """
        Drain the pygame event queue.

        Returns:
            False when the loop should end this frame
        """
        if self.config.headless:
            return True

        for event in pygame.event.get():
            if event.type == pygame.QUIT or (event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE):
                self.stop()
                return False
            if event.type == pygame.KEYDOWN and event.key == pygame.K_SPACE:
                self.toggle_pause()
            elif not self.on_event(event):
                self.stop()
                return False

        return True

    def _shutdown(self) -> None:
        failed = self.state == SimulationState.ERROR
        if not failed:
            self.state = SimulationState.STOPPING

        self.on_shutdown()
        if self.render_engine is not None:
            self.render_engine.shutdown()

        if not failed:
            self.state = SimulationState.STOPPED

        self.logger.info("Simulation finished", extra={
            "simulation": self.name,
            "state": self.state.value,
            "runtime_s": round(time.time() - self.start_time, 3),
            "frames": self.stats.frame_count,
            "events": dict(self.stats.event_counts),
        })

    @abstractmethod
    def on_initialize(self) -> bool:
        """Game-specific setup; return False to fail initialization."""

    def on_start(self) -> None:
        pass

    @abstractmethod
    def on_update(self, delta: float) -> None:
        """Advance the game by ``delta`` milliseconds."""

    @abstractmethod
    def on_render(self, renderer: RenderEngine) -> None:
        """Draw the current state."""

    def on_shutdown(self) -> None:
        pass

    def on_event(self, event: pygame.event.Event) -> bool:
        """
        Handle an event the loop did not consume.

        Returns:
            False to stop the simulation
        """
        return True
