"""
Result collection and frame ordering.

Workers finish in arbitrary order.  The ResultCollector blocks until
every scheduled frame has arrived, reporting progress as each one lands,
and hands each result to a FrameOrderer that drops it straight into its
final slot.  No sorting happens anywhere.

Failure modes
-------------
- A worker exception is delivered like a result and re-raised here as
  FrameRenderError, so the caller sees it at a single join point.
- A render that never returns blocks ``collect()`` forever unless
  ``stall_timeout_s`` is set, in which case StalledTaskError is raised
  once no result has arrived for that long.
"""

from __future__ import annotations

import logging
import queue
import sys
from dataclasses import dataclass
from typing import Any, TextIO

import numpy as np
from tqdm import tqdm

from multibrotgif.exceptions import (
    DuplicateFrameError,
    FrameIndexError,
    FrameRenderError,
    IncompleteFramesError,
    StalledTaskError,
)
from multibrotgif.types import FrameResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Progress reporting
# ---------------------------------------------------------------------------

class ProgressReporter:
    """
    Writes ``Frame: <completed> / <total>`` to stderr, rewritten in place
    after every completed frame.
    """

    BAR_FORMAT = "Frame: {n:4d} / {total}"

    def __init__(
        self,
        total: int,
        file: TextIO | None = None,
        disable: bool = False,
    ) -> None:
        self.total = total
        self.completed = 0
        self._bar = tqdm(
            total=total,
            file=file if file is not None else sys.stderr,
            bar_format=self.BAR_FORMAT,
            mininterval=0,
            miniters=1,
            disable=disable,
        )

    def update(self, n: int = 1) -> None:
        self.completed += n
        self._bar.update(n)

    def close(self) -> None:
        self._bar.close()


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

class FrameOrderer:
    """Places each result at its sequence index in a pre-sized slot list."""

    def __init__(self, total: int) -> None:
        self.total = total
        self._slots: list[np.ndarray | None] = [None] * total
        self.filled = 0

    def place(self, result: FrameResult) -> None:
        i = result.index
        if not 0 <= i < self.total:
            raise FrameIndexError(
                f"Frame index {i} outside [0, {self.total})."
            )
        if self._slots[i] is not None:
            raise DuplicateFrameError(f"Frame {i} was delivered twice.")
        self._slots[i] = result.raster
        self.filled += 1

    @property
    def is_complete(self) -> bool:
        return self.filled == self.total

    def missing(self) -> list[int]:
        return [i for i, slot in enumerate(self._slots) if slot is None]

    def ordered(self) -> list[np.ndarray]:
        """Rasters in ascending index order.

        Ownership moves to the caller; the orderer forgets them.
        """
        if not self.is_complete:
            raise IncompleteFramesError(
                f"Frames {self.missing()} have not been delivered."
            )
        rasters: list[np.ndarray] = self._slots  # type: ignore[assignment]
        self._slots = [None] * self.total
        self.filled = 0
        return rasters


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------

@dataclass
class _Delivery:
    index: int
    result: FrameResult | None = None
    error: BaseException | None = None


class ResultCollector:
    """Receives exactly *total* completed frames from the worker pool."""

    def __init__(
        self,
        total: int,
        progress: ProgressReporter | None = None,
        stall_timeout_s: float | None = None,
    ) -> None:
        self.total = total
        self.progress = progress
        self.stall_timeout_s = stall_timeout_s
        self.orderer = FrameOrderer(total)
        self.arrival_order: list[int] = []
        self._inbox: queue.Queue[_Delivery] = queue.Queue()

    # -- called from worker callbacks --------------------------------------

    def publish(self, result: FrameResult) -> None:
        self._inbox.put(_Delivery(index=result.index, result=result))

    def publish_failure(self, index: int, error: BaseException) -> None:
        self._inbox.put(_Delivery(index=index, error=error))

    # -- called from the orchestrating thread ------------------------------

    def _receive(self) -> _Delivery:
        try:
            return self._inbox.get(timeout=self.stall_timeout_s)
        except queue.Empty:
            raise StalledTaskError(
                len(self.arrival_order), self.total, self.stall_timeout_s or 0.0,
            ) from None

    def collect(self) -> list[np.ndarray]:
        """Block until every frame has arrived; return rasters in order.

        Raises
        ------
        FrameRenderError
            If a worker raised while rendering.
        StalledTaskError
            If ``stall_timeout_s`` elapses with no new result.
        """
        try:
            while len(self.arrival_order) < self.total:
                delivery = self._receive()
                if delivery.error is not None:
                    raise FrameRenderError(
                        delivery.index, _describe(delivery.error),
                    ) from delivery.error
                if delivery.result is None:
                    raise FrameRenderError(delivery.index, "worker delivered no frame")
                self.orderer.place(delivery.result)
                self.arrival_order.append(delivery.index)
                if self.progress is not None:
                    self.progress.update()
                logger.debug(
                    "Frame %d received (%d/%d, %.2fs).",
                    delivery.index, len(self.arrival_order), self.total,
                    delivery.result.render_time_s,
                )
        finally:
            if self.progress is not None:
                self.progress.close()
        return self.orderer.ordered()


def _describe(exc: Any) -> str:
    return f"{type(exc).__name__}: {exc}"
