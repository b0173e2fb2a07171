"""
Cooperative yielding helpers for long-running analysis passes.

Analysis runs on a single event loop. Long loops hand control back to the
scheduler every ``chunk_size`` items so progress callbacks and newer requests
get a chance to run, and check at each yield point whether the result is
still wanted.
"""

import asyncio
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from .exceptions import AnalysisCancelledError

T = TypeVar("T")

ProgressCallback = Callable[[float, str], None]
StillWanted = Callable[[], bool]


async def tick() -> None:
    """Yield control back to the event loop once."""
    await asyncio.sleep(0)


class Checkpoint:
    """Yield point shared by every stage of one analysis pass.

    Each call to :meth:`__call__` yields to the event loop and raises
    :class:`AnalysisCancelledError` when the pass is no longer wanted.
    Progress reports are forwarded to the optional callback.
    """

    def __init__(
        self,
        still_wanted: StillWanted | None = None,
        on_progress: ProgressCallback | None = None,
    ):
        self.still_wanted = still_wanted
        self.on_progress = on_progress
        self.yields = 0

    def ensure_wanted(self) -> None:
        """Raise if the pass has been superseded."""
        if self.still_wanted is not None and not self.still_wanted():
            raise AnalysisCancelledError("Analysis superseded by newer input")

    async def __call__(self) -> None:
        self.ensure_wanted()
        await tick()
        self.yields += 1
        self.ensure_wanted()

    def report(self, percent: float, message: str) -> None:
        """Forward a progress update; purely observational."""
        if self.on_progress is not None:
            self.on_progress(max(0.0, min(100.0, percent)), message)


async def batch_process(
    items: Iterable[T],
    callback: Callable[[T, int], Any],
    chunk_size: int = 250,
    checkpoint: Checkpoint | None = None,
    on_chunk: Callable[[int, int], None] | None = None,
) -> None:
    """Apply ``callback`` to every item, yielding between chunks.

    Args:
        items: Items to process in order
        callback: Called with ``(item, index)``
        chunk_size: Number of items between yield points
        checkpoint: Yield point; a bare :func:`tick` is used when omitted
        on_chunk: Called with ``(processed, total)`` after each chunk
    """
    sequence = list(items)
    total = len(sequence)
    step = max(1, chunk_size)

    for start in range(0, total, step):
        for offset, item in enumerate(sequence[start : start + step]):
            callback(item, start + offset)
        processed = min(start + step, total)
        if on_chunk is not None:
            on_chunk(processed, total)
        if processed < total:
            if checkpoint is not None:
                await checkpoint()
            else:
                await tick()
