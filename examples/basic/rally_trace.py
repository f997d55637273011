#!/usr/bin/env python3
"""
Rally Trace Demo

Drives the physics step directly, without a window, and prints every
bounce and reset as it happens. The left paddle follows the ball; the
right paddle stays put, so the ball eventually gets past it.

Usage:
    python examples/basic/rally_trace.py [frames]
"""

import sys
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from pongsim.config import get_settings
from pongsim.core.logging import configure_logging, get_logger
from pongsim.physics import Board, PaddleSide, SimulationCore, create_initial_snapshot


def follow_ball(snapshot, side: PaddleSide) -> int:
    """Direction that moves a paddle's centre towards the ball."""
    _, center_y = snapshot.paddle(side).center
    if snapshot.ball.y < center_y - 4:
        return -1
    if snapshot.ball.y > center_y + 4:
        return 1
    return 0


def main() -> int:
    frames = int(sys.argv[1]) if len(sys.argv) > 1 else 1500
    delta = 16.0

    configure_logging("INFO", file_output=False)
    logger = get_logger("examples.rally_trace")

    settings = get_settings()
    board = Board(*settings.board_size)
    core = SimulationCore(board)
    snapshot = create_initial_snapshot(board, settings)

    logger.info("Rally started", extra={"frames": frames, "delta": delta})

    for frame in range(frames):
        left = follow_ball(snapshot, PaddleSide.LEFT)
        snapshot, events = core.advance_with_events(delta, left, 0, snapshot)

        for event in events:
            print(f"{frame * delta / 1000:7.2f}s  {event.value:<20} "
                  f"ball=({snapshot.ball.x:6.1f}, {snapshot.ball.y:6.1f})")

    logger.info("Rally finished")
    return 0


if __name__ == "__main__":
    sys.exit(main())
