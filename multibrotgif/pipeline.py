"""
Top-level animation pipeline.

    Scheduler --> Worker Pool --> Collector/Orderer --> Assembler --> GIF

``render_animation`` is the single entry point used by the CLI.
"""

from __future__ import annotations

import logging
import time
from functools import partial
from typing import BinaryIO, TextIO

from multibrotgif.assembly import AnimationAssembler, FrameDelay, GifEncoder
from multibrotgif.collector import ProgressReporter, ResultCollector
from multibrotgif.config import resolve_worker_count, validate_config
from multibrotgif.palette import Palette, get_palette
from multibrotgif.pool import BoundedWorkerPool, RenderFn
from multibrotgif.renderer import render_frame
from multibrotgif.scheduler import schedule_from_config
from multibrotgif.types import Animation, PipelineConfig

logger = logging.getLogger(__name__)


def make_renderer(config: PipelineConfig, palette: Palette) -> RenderFn:
    """Bind the per-run rendering options; picklable for process workers."""
    return partial(
        render_frame,
        palette_size=palette.size,
        endpoint=config.endpoint,
        bailout=config.bailout,
    )


def render_animation(
    config: PipelineConfig,
    out: BinaryIO,
    *,
    render: RenderFn | None = None,
    progress_file: TextIO | None = None,
    show_progress: bool = True,
    encoder: GifEncoder | None = None,
) -> Animation:
    """Render every frame described by *config* and write the GIF to *out*.

    A non-positive frame count yields an empty Animation; the encoder is
    not called and nothing is written.

    Raises
    ------
    InvalidParameterRange
        If the sweep ends before it starts.  Raised before any frame is
        rendered.
    FrameRenderError, StalledTaskError
        If a frame fails or stalls.
    EncodingFailure
        If the encoder rejects the animation.
    """
    validate_config(config)
    schedule = schedule_from_config(config)
    palette = get_palette(config.palette)
    encoder = encoder or GifEncoder(palette)
    assembler = AnimationAssembler(
        encoder,
        frame_delay=FrameDelay(default_ticks=config.delay),
        loop_count=config.loop_count,
    )

    total = len(schedule)
    if total == 0:
        logger.warning(
            "Frame count is %d; producing an empty animation.", config.frames,
        )
        return assembler.assemble([])

    t0 = time.monotonic()
    pool = BoundedWorkerPool(
        render or make_renderer(config, palette),
        max_workers=resolve_worker_count(config),
        executor=config.executor,
    )
    collector = ResultCollector(
        total,
        progress=ProgressReporter(total, file=progress_file, disable=not show_progress),
        stall_timeout_s=config.stall_timeout_s,
    )
    rasters = pool.run(schedule, collector)
    logger.info(
        "Rendered %d frames in %.2fs (peak concurrency %d).",
        total, time.monotonic() - t0, pool.permits.peak,
    )

    animation = assembler.assemble(rasters)
    assembler.encode(animation, out)
    return animation
