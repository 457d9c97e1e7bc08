"""
Shared fixtures for the multibrotgif test suite.
"""

from __future__ import annotations

import threading
import time

import numpy as np
import pytest

from multibrotgif.renderer import render_frame
from multibrotgif.types import FrameResult, FrameTask


def make_task(
    index: int = 0,
    *,
    size: int = 10,
    exponent: float = 2.0,
    iterations: int = 50,
    bounds: tuple[float, float, float, float] = (-2.0, 2.0, -2.0, 2.0),
) -> FrameTask:
    x_min, x_max, y_min, y_max = bounds
    return FrameTask(
        index=index,
        x_min=x_min, x_max=x_max, y_min=y_min, y_max=y_max,
        exponent=exponent,
        iterations=iterations,
        width=size,
        height=size,
    )


class InstrumentedRender:
    """Thread-executor render that tracks how many calls overlap.

    Frame *i* sleeps ``(total - i) * step_s`` so that later indices
    finish first.
    """

    def __init__(self, total: int, step_s: float = 0.02, palette_size: int = 256) -> None:
        self.total = total
        self.step_s = step_s
        self.palette_size = palette_size
        self._lock = threading.Lock()
        self.running = 0
        self.peak = 0
        self.calls: list[int] = []

    def __call__(self, task: FrameTask) -> FrameResult:
        with self._lock:
            self.running += 1
            self.peak = max(self.peak, self.running)
            self.calls.append(task.index)
        try:
            time.sleep((self.total - task.index) * self.step_s)
            return render_frame(task, self.palette_size)
        finally:
            with self._lock:
                self.running -= 1


@pytest.fixture
def small_task() -> FrameTask:
    return make_task()


@pytest.fixture
def raster_sequence() -> list[np.ndarray]:
    """Four distinct 8x8 rasters."""
    return [np.full((8, 8), i * 10, dtype=np.uint8) for i in range(4)]
