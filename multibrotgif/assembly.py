"""
Animation assembly and GIF encoding.

The assembler pairs ordered rasters with per-frame delays and a loop
count.  Encoding is delegated to GifEncoder, which attaches the palette to
palette-index frames and writes them with Pillow's GIF plugin.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Sequence

import numpy as np
from PIL import GifImagePlugin, Image

from .exceptions import EncodingFailure
from .palette import Palette
from .types import Animation, AnimationFrame

logger = logging.getLogger(__name__)

# GIF delays are stored in 1/100 s ticks; Pillow takes milliseconds.
MS_PER_TICK = 10


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

@dataclass
class FrameDelay:
    """Per-frame timing control.

    ``delays`` maps a frame index to its display duration in ticks
    (1/100 s).  Frames not present in the mapping use ``default_ticks``.
    """
    default_ticks: int = 2
    delays: dict[int, int] = field(default_factory=dict)

    def resolve(self, n_frames: int) -> list[int]:
        """Return a list of per-frame delays in ticks."""
        return [self.delays.get(i, self.default_ticks) for i in range(n_frames)]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

class GifEncoder:
    """Encode an Animation of palette-index rasters as a GIF stream."""

    def __init__(self, palette: Palette) -> None:
        self.palette = palette

    def _to_image(self, raster: np.ndarray) -> Image.Image:
        height, width = raster.shape
        img = Image.frombytes(
            "P", (width, height), np.ascontiguousarray(raster, dtype=np.uint8).tobytes(),
        )
        img.putpalette(self.palette.to_bytes())
        return img

    def encode(self, animation: Animation, out: BinaryIO) -> None:
        """Write *animation* to *out*, one GIF image per frame.

        ``Image.save(save_all=True)`` folds a frame identical to its
        predecessor into the previous one, so the stream is built from
        ``GifImagePlugin.getheader``/``getdata`` instead.  The written GIF
        always holds ``len(animation)`` frames.

        Raises
        ------
        EncodingFailure
            If the animation is empty or Pillow rejects it.
        """
        if not animation.frames:
            raise EncodingFailure("Cannot encode an animation with no frames.")

        try:
            images = [self._to_image(f.raster) for f in animation.frames]
            # Global palette and the loop extension; no palette optimisation
            # so raster indices are written unchanged.
            header, _ = GifImagePlugin.getheader(
                images[0], info={"loop": animation.loop_count},
            )
            for chunk in header:
                out.write(chunk)
            for img, frame in zip(images, animation.frames):
                for chunk in GifImagePlugin.getdata(
                    img,
                    duration=frame.delay_ticks * MS_PER_TICK,
                    disposal=1,           # do not dispose
                ):
                    out.write(chunk)
            out.write(b";")
        except (OSError, ValueError, TypeError) as exc:
            raise EncodingFailure(f"GIF encoding failed: {exc}") from exc

        logger.info("Encoded %d frames.", len(images))


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

class AnimationAssembler:
    """Builds the ordered Animation and hands it to the encoder.

    Usage::

        assembler = AnimationAssembler(
            GifEncoder(plan9_palette()),
            frame_delay=FrameDelay(default_ticks=2),
            loop_count=0,
        )
        animation = assembler.assemble(ordered_rasters)
        assembler.encode(animation, sys.stdout.buffer)
    """

    def __init__(
        self,
        encoder: GifEncoder,
        frame_delay: FrameDelay | None = None,
        loop_count: int = 0,
    ) -> None:
        self.encoder = encoder
        self.frame_delay = frame_delay or FrameDelay()
        self.loop_count = loop_count

    def assemble(self, rasters: Sequence[np.ndarray]) -> Animation:
        delays = self.frame_delay.resolve(len(rasters))
        return Animation(
            frames=[
                AnimationFrame(raster=r, delay_ticks=d)
                for r, d in zip(rasters, delays)
            ],
            loop_count=self.loop_count,
        )

    def encode(self, animation: Animation, out: BinaryIO) -> None:
        self.encoder.encode(animation, out)
