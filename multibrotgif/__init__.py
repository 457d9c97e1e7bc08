"""
multibrotgif -- Multibrot exponent sweep to animated GIF.

Renders the frames of a parameter sweep on a bounded worker pool,
restores their sequence order as they complete, and encodes the result
as a single animated GIF.
"""

__version__ = "0.1.0"

from multibrotgif.types import (
    Animation,
    AnimationFrame,
    Bailout,
    Domain,
    Endpoint,
    ExecutorKind,
    FrameResult,
    FrameTask,
    PipelineConfig,
    SweepTarget,
)

__all__ = [
    "Animation",
    "AnimationFrame",
    "Bailout",
    "Domain",
    "Endpoint",
    "ExecutorKind",
    "FrameResult",
    "FrameTask",
    "PipelineConfig",
    "SweepTarget",
]
