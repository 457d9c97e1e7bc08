"""
Command-line entry point.

Usage:
    multibrotgif --dimension 400 --frames 120 --power-start 2 --power-end 8 > out.gif
    multibrotgif --config run.yaml -o out.gif
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .. import __version__
from ..config import build_config, load_config_file
from ..exceptions import MultibrotGifError
from ..palette import available_palettes
from ..pipeline import render_animation
from ..scheduler import schedule_from_config
from ..types import Bailout, Endpoint, ExecutorKind, SweepTarget

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="multibrotgif",
        description="Render a multibrot exponent sweep as an animated GIF",
    )
    p.add_argument("--version", action="version", version=f"multibrotgif {__version__}")
    p.add_argument(
        "--config", type=Path, default=None,
        help="YAML file of configuration keys; flags override it",
    )
    p.add_argument(
        "--dimension", type=int, default=None,
        help="Output image width and height in pixels (default: 1000)",
    )
    p.add_argument(
        "--frames", type=int, default=None,
        help="Total number of frames to render (default: 1000)",
    )
    p.add_argument(
        "--delay", type=int, default=None,
        help="Delay between frames in 1/100ths of a second (default: 2)",
    )
    p.add_argument(
        "--iterations", type=int, default=None,
        help="Maximum iterations per pixel (default: 1000)",
    )
    p.add_argument(
        "--power-start", "--powerStart", dest="power_start", type=float, default=None,
        help="Exponent of the first frame (default: 2.0)",
    )
    p.add_argument(
        "--power-end", "--powerEnd", dest="power_end", type=float, default=None,
        help="Exponent of the last frame (default: 10.0)",
    )
    p.add_argument(
        "--sweep", dest="sweep_target", choices=[t.value for t in SweepTarget], default=None,
        help="Parameter to sweep (default: exponent)",
    )
    p.add_argument(
        "--sweep-start", type=float, default=None,
        help="Start value when sweeping a domain edge",
    )
    p.add_argument(
        "--sweep-end", type=float, default=None,
        help="End value when sweeping a domain edge",
    )
    p.add_argument(
        "--endpoint", choices=[e.value for e in Endpoint], default=None,
        help="inclusive: last frame/pixel lands on the end value; "
             "exclusive: one step short (default: inclusive)",
    )
    p.add_argument(
        "--bailout", choices=[b.value for b in Bailout], default=None,
        help="Escape threshold: domain x bound or 2.0 (default: domain)",
    )
    p.add_argument(
        "--loop", dest="loop_count", type=int, default=None,
        help="GIF loop count; 0 = forever (default: 0)",
    )
    p.add_argument(
        "--palette", choices=available_palettes(), default=None,
        help="Color table (default: plan9)",
    )
    p.add_argument(
        "--workers", type=int, default=None,
        help="Concurrent frame renders; 0 = one per CPU (default: 0)",
    )
    p.add_argument(
        "--executor", choices=[e.value for e in ExecutorKind], default=None,
        help="Worker pool backend (default: process)",
    )
    p.add_argument(
        "--stall-timeout", dest="stall_timeout_s", type=float, default=None,
        help="Abort when no frame completes for this many seconds (default: wait forever)",
    )
    p.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output GIF path (default: standard output)",
    )
    p.add_argument("-q", "--quiet", action="store_true", help="Hide the progress line")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


_CONFIG_FLAGS = (
    "dimension", "frames", "delay", "iterations", "power_start", "power_end",
    "sweep_target", "sweep_start", "sweep_end", "endpoint", "bailout",
    "loop_count", "palette", "workers", "executor", "stall_timeout_s",
)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        file_values = load_config_file(args.config) if args.config else {}
        config = build_config(file_values)
        config = build_config(
            {name: getattr(args, name) for name in _CONFIG_FLAGS}, base=config,
        )
    except MultibrotGifError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    # Validate the sweep before opening the output so a bad range or an
    # empty sweep leaves no file behind.
    try:
        schedule = schedule_from_config(config)
    except MultibrotGifError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if len(schedule) == 0:
        logger.warning("Frame count is %d; nothing to write.", config.frames)
        return 0

    try:
        if args.output is not None:
            with args.output.open("wb") as fh:
                render_animation(config, fh, show_progress=not args.quiet)
        else:
            render_animation(config, sys.stdout.buffer, show_progress=not args.quiet)
            sys.stdout.buffer.flush()
    except MultibrotGifError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    return 0


def cli_entry() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
