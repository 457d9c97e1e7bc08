"""
Core data structures used throughout the frame pipeline.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

import numpy as np


class Endpoint(enum.Enum):
    """How a linear interpolation treats its end value.

    Shared by the parameter sweep and the pixel-to-domain mapping so the
    two never disagree.
    """
    INCLUSIVE = "inclusive"   # divide by n - 1; the end value is reached
    EXCLUSIVE = "exclusive"   # divide by n; the end value is never reached


class Bailout(enum.Enum):
    """Escape threshold used by the escape-time recurrence."""
    DOMAIN_BOUND = "domain"   # |z| compared against the domain's x_max
    CANONICAL = "canonical"   # |z| compared against 2.0


class SweepTarget(enum.Enum):
    """Which frame parameter is swept from start to end."""
    EXPONENT = "exponent"
    X_MIN = "x_min"
    X_MAX = "x_max"
    Y_MIN = "y_min"
    Y_MAX = "y_max"


class ExecutorKind(enum.Enum):
    """Executor backing the worker pool."""
    PROCESS = "process"
    THREAD = "thread"


@dataclass(frozen=True)
class Domain:
    """Rectangular region of the complex plane."""
    x_min: float = -2.0
    x_max: float = 2.0
    y_min: float = -2.0
    y_max: float = 2.0

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min


@dataclass(frozen=True)
class FrameTask:
    """Everything needed to render one animation frame."""
    index: int                # 0-based sequence number
    x_min: float
    x_max: float
    y_min: float
    y_max: float
    exponent: float
    iterations: int           # per-pixel iteration cap
    width: int
    height: int


@dataclass
class FrameResult:
    """A rendered frame: palette indices laid out as (height, width)."""
    index: int
    raster: np.ndarray
    render_time_s: float = 0.0


@dataclass
class AnimationFrame:
    raster: np.ndarray
    delay_ticks: int          # 1/100 s units


@dataclass
class Animation:
    """Ordered frames plus loop count, ready for the encoder."""
    frames: list[AnimationFrame] = field(default_factory=list)
    loop_count: int = 0       # 0 = loop forever

    def __len__(self) -> int:
        return len(self.frames)

    @property
    def delays(self) -> list[int]:
        return [f.delay_ticks for f in self.frames]


@dataclass
class PipelineConfig:
    """Full configuration for one animation run.

    Constructed once at pipeline start and handed to the scheduler, the
    worker pool and the renderer.
    """
    dimension: int = 1000
    frames: int = 1000
    delay: int = 2                # ticks (1/100 s) between frames
    iterations: int = 1000
    power_start: float = 2.0
    power_end: float = 10.0
    domain: Domain = field(default_factory=Domain)
    sweep_target: SweepTarget = SweepTarget.EXPONENT
    sweep_start: float | None = None  # bounds when sweeping a domain edge
    sweep_end: float | None = None
    endpoint: Endpoint = Endpoint.INCLUSIVE
    bailout: Bailout = Bailout.DOMAIN_BOUND
    loop_count: int = 0
    workers: int = 0              # 0 = auto-detect from CPU count
    executor: ExecutorKind = ExecutorKind.PROCESS
    palette: str = "plan9"
    stall_timeout_s: float | None = None  # None = wait forever
