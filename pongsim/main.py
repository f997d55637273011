"""
Command line entry point for PongSim.

``pongsim`` opens a window for two players sharing one keyboard.
``pongsim --headless`` steps the physics for a fixed number of frames with
no window and no keys held, then prints where everything ended up.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from . import __version__
from .config import Config, get_config, set_config, get_settings, reset_settings
from .core.logging import configure_logging, get_logger, shutdown_logging
from .core.exceptions import (
    PongSimError, setup_exception_handling, handle_error, handle_crash
)

DEFAULT_HEADLESS_FRAMES = 600
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

USAGE_NOTES = """
Keys:
  W / S         left paddle up / down
  Up / Down     right paddle up / down
  Space         pause or resume
  Backspace     put ball and paddles back
  Esc           quit

Examples:
  pongsim --board-size 800x480
  pongsim --config tournament.json --debug
  pongsim --headless --frames 1200
"""


def setup_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pongsim",
        description="Two-player Pong on a deterministic physics step.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=USAGE_NOTES,
    )
    parser.add_argument("--version", action="version", version=f"PongSim {__version__}")
    parser.add_argument("--debug", action="store_true",
                        help="debug mode: DEBUG logging, no log file")
    parser.add_argument("--config", metavar="FILE",
                        help="JSON file layered over the user configuration")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="override app.loglevel")
    parser.add_argument("--log-file", metavar="FILE",
                        help="write the log file into FILE's directory")
    parser.add_argument("--board-size", metavar="WIDTHxHEIGHT",
                        help="board size in pixels, e.g. 800x480")
    parser.add_argument("--headless", action="store_true",
                        help="simulate without a window and print the final state")
    parser.add_argument("--frames", type=int, metavar="N",
                        help=f"stop after N frames (headless default: {DEFAULT_HEADLESS_FRAMES})")
    parser.add_argument("--reset-config", action="store_true",
                        help="overwrite the user configuration with defaults and exit")
    return parser


def parse_board_size(size_str: str) -> Tuple[int, int]:
    """
    Parse "WIDTHxHEIGHT".

    Raises:
        ValueError: If the string is malformed or a dimension is not positive
    """
    try:
        width, height = (int(part) for part in size_str.lower().split('x'))
    except ValueError:
        raise ValueError(f"Invalid board size '{size_str}', expected WIDTHxHEIGHT such as 800x480") from None

    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid board size '{size_str}', both dimensions must be positive")
    return width, height


def apply_command_line_overrides(args: argparse.Namespace) -> None:
    """
    Copy command line options into the global configuration.

    Raises:
        ValueError: If ``--board-size`` is malformed
    """
    config = get_config()

    if args.debug:
        config.set("app.debug", True)
        config.set("app.loglevel", "DEBUG")
    if args.log_level:
        config.set("app.loglevel", args.log_level)
    if args.board_size:
        width, height = parse_board_size(args.board_size)
        config.set("board.width", width)
        config.set("board.height", height)


def initialize_application(args: argparse.Namespace) -> bool:
    """
    Load configuration, then set up logging and exception reporting.

    Problems are reported on stderr since logging may not be running yet.

    Returns:
        False if the application cannot start
    """
    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: configuration file '{args.config}' not found", file=sys.stderr)
            return False
        set_config(Config(config_path))
        reset_settings()

    try:
        apply_command_line_overrides(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return False

    settings = get_settings()
    log_options = {}
    if args.log_file:
        log_options["log_dir"] = Path(args.log_file).parent
        log_options["file_output"] = True

    configure_logging(log_level=settings.log_level, **log_options)
    setup_exception_handling()

    get_logger("main").info("PongSim starting", extra={
        "version": __version__,
        "debug_mode": settings.debug_mode,
        "board": "x".join(str(n) for n in settings.board_size),
        "headless": args.headless,
    })
    return True


def format_snapshot(snapshot) -> str:
    ball, left, right = snapshot.ball, snapshot.paddle_left, snapshot.paddle_right
    return "\n".join([
        f"ball         x={ball.x:.2f} y={ball.y:.2f} vx={ball.vx:+.3f} vy={ball.vy:+.3f}",
        f"left paddle  x={left.x:.2f} y={left.y:.2f}",
        f"right paddle x={right.x:.2f} y={right.y:.2f}",
    ])


def run_application(args: argparse.Namespace) -> int:
    """Play, or simulate headless, and return the exit code."""
    # Deferred so --help and --version never touch pygame
    from .simulation import PongSimulation, SimulationConfig

    settings = get_settings()

    if args.headless:
        frames = DEFAULT_HEADLESS_FRAMES if args.frames is None else args.frames
        game = PongSimulation(settings=settings, config=SimulationConfig(headless=True))
        snapshot = game.run_headless(frames)

        print(f"PongSim {__version__} - {frames} frames simulated")
        print(format_snapshot(snapshot))
        for event, count in sorted(game.stats.event_counts.items()):
            print(f"  {event}: {count}")
        return EXIT_OK

    game = PongSimulation(settings=settings)
    if not game.initialize():
        get_logger("main").error("Game could not start")
        return EXIT_FAILURE

    game.run(max_frames=args.frames)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point.

    Args:
        argv: Arguments without the program name, ``sys.argv[1:]`` when None

    Returns:
        0 on success, 1 on failure, 130 when interrupted
    """
    parser = setup_argument_parser()
    args = parser.parse_args(argv)

    if args.frames is not None and args.frames < 0:
        parser.error("--frames must not be negative")

    if args.reset_config:
        config = get_config()
        config.reset_to_defaults()
        config.save()
        print("Configuration reset to defaults")
        return EXIT_OK

    if not initialize_application(args):
        return EXIT_FAILURE

    try:
        return run_application(args)
    except KeyboardInterrupt:
        get_logger("main").info("Interrupted by user")
        return EXIT_INTERRUPTED
    except PongSimError as e:
        handle_error(e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except Exception as e:
        handle_crash(e)
        return EXIT_FAILURE
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
