"""
Per-frame parameter scheduling.

A run sweeps one parameter (the exponent by default, or one of the
domain bounds) linearly from a start value to an end value across
``total`` frames.  ``FrameSchedule`` yields the resulting FrameTasks
lazily and can be iterated any number of times.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Iterator

from multibrotgif.exceptions import ConfigError, InvalidParameterRange
from multibrotgif.types import (
    Domain,
    Endpoint,
    FrameTask,
    PipelineConfig,
    SweepTarget,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterSweep:
    """Linear interpolation from *start* to *end* over *total* frames."""
    start: float
    end: float
    total: int
    endpoint: Endpoint = Endpoint.INCLUSIVE

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidParameterRange(self.start, self.end)

    def value_at(self, i: int) -> float:
        den = self.total - 1 if self.endpoint is Endpoint.INCLUSIVE else self.total
        if den <= 0:
            return self.start
        return self.start + (self.end - self.start) * (i / den)

    def values(self) -> list[float]:
        return [self.value_at(i) for i in range(max(self.total, 0))]


class FrameSchedule:
    """Restartable lazy sequence of FrameTasks indexed ``0..total-1``."""

    def __init__(
        self,
        sweep: ParameterSweep,
        *,
        target: SweepTarget = SweepTarget.EXPONENT,
        domain: Domain = Domain(),
        exponent: float = 2.0,
        iterations: int = 1000,
        width: int = 1000,
        height: int = 1000,
    ) -> None:
        self.sweep = sweep
        self.target = target
        self.domain = domain
        self.exponent = exponent
        self.iterations = iterations
        self.width = width
        self.height = height

    def __len__(self) -> int:
        return max(self.sweep.total, 0)

    def __iter__(self) -> Iterator[FrameTask]:
        for i in range(len(self)):
            yield self.task_at(i)

    def task_at(self, i: int) -> FrameTask:
        if not 0 <= i < len(self):
            raise IndexError(f"frame index {i} out of range [0, {len(self)})")
        value = self.sweep.value_at(i)
        task = FrameTask(
            index=i,
            x_min=self.domain.x_min,
            x_max=self.domain.x_max,
            y_min=self.domain.y_min,
            y_max=self.domain.y_max,
            exponent=self.exponent,
            iterations=self.iterations,
            width=self.width,
            height=self.height,
        )
        return dataclasses.replace(task, **{self.target.value: value})


def schedule_from_config(config: PipelineConfig) -> FrameSchedule:
    """Build the frame schedule described by *config*.

    The exponent sweeps ``power_start -> power_end``.  When a domain edge
    is swept instead, the exponent is held at ``power_start`` and the edge
    moves from ``sweep_start`` to ``sweep_end``.

    Raises
    ------
    InvalidParameterRange
        If ``power_end < power_start`` or ``sweep_end < sweep_start``.
    ConfigError
        If a domain sweep is requested without its bounds.
    """
    if config.power_end < config.power_start:
        raise InvalidParameterRange(config.power_start, config.power_end)

    if config.sweep_target is SweepTarget.EXPONENT:
        start, end = config.power_start, config.power_end
    else:
        if config.sweep_start is None or config.sweep_end is None:
            raise ConfigError(
                f"Sweeping {config.sweep_target.value} needs both "
                f"sweep_start and sweep_end."
            )
        start, end = config.sweep_start, config.sweep_end

    sweep = ParameterSweep(
        start=start,
        end=end,
        total=config.frames,
        endpoint=config.endpoint,
    )
    schedule = FrameSchedule(
        sweep,
        target=config.sweep_target,
        domain=config.domain,
        exponent=config.power_start,
        iterations=config.iterations,
        width=config.dimension,
        height=config.dimension,
    )
    logger.debug(
        "Scheduled %d frames sweeping %s %g -> %g (%s).",
        len(schedule), config.sweep_target.value,
        sweep.start, sweep.end, sweep.endpoint.value,
    )
    return schedule
