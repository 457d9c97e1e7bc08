"""
Custom exception hierarchy for multibrotgif.

All multibrotgif exceptions inherit from MultibrotGifError so callers can
catch the entire family with a single except clause.
"""

from __future__ import annotations


class MultibrotGifError(Exception):
    """Base exception for all multibrotgif errors."""


class InvalidParameterRange(MultibrotGifError):
    """Raised when a sweep ends before it starts."""

    def __init__(self, start: float, end: float) -> None:
        super().__init__(
            f"Sweep end value {end} is less than start value {start}."
        )
        self.start = start
        self.end = end


class ConfigError(MultibrotGifError):
    """Raised when a configuration file or value is invalid."""


class FrameRenderError(MultibrotGifError):
    """Raised when a worker fails to render a frame."""

    def __init__(self, index: int, message: str) -> None:
        super().__init__(f"Frame {index} failed to render: {message}")
        self.index = index


class StalledTaskError(MultibrotGifError):
    """Raised when no frame completes within the stall timeout."""

    def __init__(self, received: int, total: int, timeout_s: float) -> None:
        super().__init__(
            f"No frame completed within {timeout_s:g}s "
            f"({received}/{total} received)."
        )
        self.received = received
        self.total = total


class DuplicateFrameError(MultibrotGifError):
    """Raised when two results claim the same sequence index."""


class FrameIndexError(MultibrotGifError):
    """Raised when a result's sequence index is outside [0, total)."""


class IncompleteFramesError(MultibrotGifError):
    """Raised when ordered output is requested before every slot is filled."""


class EncodingFailure(MultibrotGifError):
    """Raised when the GIF encoder rejects the assembled animation."""
