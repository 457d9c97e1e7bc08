"""
Escape-time renderer for the generalized Mandelbrot recurrence.

For every pixel the recurrence ``z <- z**p + c`` is iterated from
``z = 0`` until ``|z|`` reaches the escape threshold or the iteration cap
is hit.  The pixel's palette index is the iteration count modulo the
palette size.

Escape threshold
----------------
With ``Bailout.DOMAIN_BOUND`` the threshold is the task's ``x_max``
rather than the canonical radius 2.0, which keeps output identical to
earlier renders.  ``Bailout.CANONICAL`` switches to 2.0.

Each call renders one whole frame on the calling worker; the worker pool
provides all parallelism.
"""

from __future__ import annotations

import math
import time

import numpy as np

from multibrotgif.types import Bailout, Endpoint, FrameResult, FrameTask


def escape_threshold(task: FrameTask, bailout: Bailout) -> float:
    if bailout is Bailout.CANONICAL:
        return 2.0
    return task.x_max


def axis_coordinates(
    lo: float,
    hi: float,
    n: int,
    endpoint: Endpoint = Endpoint.INCLUSIVE,
) -> np.ndarray:
    """Map pixel positions ``0..n-1`` linearly onto ``[lo, hi]``.

    ``Endpoint.INCLUSIVE`` puts the last pixel on *hi*;
    ``Endpoint.EXCLUSIVE`` stops one step short of it.
    """
    den = n - 1 if endpoint is Endpoint.INCLUSIVE else n
    if den <= 0:
        return np.full(n, lo, dtype=np.float64)
    return lo + (hi - lo) * np.arange(n, dtype=np.float64) / den


def zero_power(exponent: float) -> complex:
    """Value of ``0 ** exponent``: 0 for positive, 1 for zero, infinite for negative."""
    if exponent > 0:
        return 0j
    if exponent == 0:
        return 1 + 0j
    return complex(math.inf, 0.0)


def escape_count(
    c: complex,
    exponent: float,
    iterations: int,
    threshold: float,
) -> int:
    """Iteration count for a single point of the complex plane."""
    z = 0j
    count = 0
    while abs(z) < threshold and count < iterations:
        z = (z ** exponent if z != 0 else zero_power(exponent)) + c
        count += 1
    return count


def iteration_counts(
    task: FrameTask,
    endpoint: Endpoint = Endpoint.INCLUSIVE,
    bailout: Bailout = Bailout.DOMAIN_BOUND,
) -> np.ndarray:
    """Raw escape-time counts for every pixel, shape ``(height, width)``.

    Counts lie in ``[0, task.iterations]``.
    """
    xs = axis_coordinates(task.x_min, task.x_max, task.width, endpoint)
    ys = axis_coordinates(task.y_min, task.y_max, task.height, endpoint)
    c = xs[np.newaxis, :] + 1j * ys[:, np.newaxis]

    threshold = escape_threshold(task, bailout)
    z = np.zeros_like(c)
    counts = np.zeros(c.shape, dtype=np.int64)
    active = np.abs(z) < threshold

    for _ in range(task.iterations):
        if not active.any():
            break
        za = z[active]
        with np.errstate(all="ignore"):
            powered = np.where(za == 0, zero_power(task.exponent), za ** task.exponent)
        z[active] = powered + c[active]
        counts[active] += 1
        with np.errstate(invalid="ignore"):
            active &= np.abs(z) < threshold

    return counts


def render_frame(
    task: FrameTask,
    palette_size: int,
    endpoint: Endpoint = Endpoint.INCLUSIVE,
    bailout: Bailout = Bailout.DOMAIN_BOUND,
) -> FrameResult:
    """Render one frame to palette indices.

    Runs inside a worker; pure and deterministic for a given task.
    """
    t0 = time.monotonic()
    counts = iteration_counts(task, endpoint, bailout)
    raster = (counts % palette_size).astype(np.uint8)
    return FrameResult(
        index=task.index,
        raster=raster,
        render_time_s=time.monotonic() - t0,
    )
