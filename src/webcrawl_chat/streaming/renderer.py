"""Simulated incremental display of an already received text.

The whole text is known up front; the renderer only reveals it one character
per tick so the display feels streamed. One asyncio task drives each reveal,
and a renderer never lets two reveals write to its buffer: starting a new one
cancels the previous one first, synchronously.
"""
import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = 0.005

DisplayCallback = Callable[[str], None]


class RenderTask:
    """One reveal of ``text``, holding a cursor that only moves forward."""

    def __init__(
        self,
        text: str,
        tick_interval: float,
        on_update: DisplayCallback,
        on_complete: Optional[DisplayCallback] = None,
    ):
        self.text = text
        self.tick_interval = tick_interval
        self.cursor = 0
        self._on_update = on_update
        self._on_complete = on_complete
        self._cancelled = False
        self._completed = False
        self._task: Optional[asyncio.Task] = None

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._completed or self._cancelled

    def start(self) -> "RenderTask":
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self

    def cancel(self) -> None:
        """Stop the reveal. Safe to call any number of times, and after completion."""
        if self.done:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        logger.debug(f"Render cancelled at {self.cursor}/{len(self.text)} characters")

    async def wait(self) -> bool:
        """Wait for the reveal to end. Returns True if it ran to completion."""
        if self._task is not None:
            await asyncio.wait({self._task})
            if not self._task.cancelled() and self._task.exception() is not None:
                raise self._task.exception()
        return self._completed

    async def _run(self) -> None:
        for cursor in range(1, len(self.text) + 1):
            await asyncio.sleep(self.tick_interval)
            if self._cancelled:
                return
            self.cursor = cursor
            self._on_update(self.text[:cursor])
        if self._cancelled:
            return
        self._completed = True
        if self._on_complete is not None:
            self._on_complete(self.text)


class StreamRenderer:
    """Owns the displayed buffer and the single in-flight reveal."""

    def __init__(self, tick_interval: float = DEFAULT_TICK_INTERVAL, on_display: Optional[DisplayCallback] = None):
        self.tick_interval = tick_interval
        self.on_display = on_display
        self._buffer = ""
        self._current: Optional[RenderTask] = None

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def current(self) -> Optional[RenderTask]:
        return self._current

    def start(self, text: str, on_complete: Optional[DisplayCallback] = None) -> RenderTask:
        """Cancel any in-flight reveal, then start revealing ``text``."""
        self.cancel()
        self._write(None, "")

        def on_update(prefix: str) -> None:
            self._write(task, prefix)

        task = RenderTask(text, self.tick_interval, on_update, on_complete)
        self._current = task
        return task.start()

    def show(self, text: str) -> None:
        """Cancel any in-flight reveal and display ``text`` at once."""
        self.cancel()
        self._current = None
        self._write(None, text)

    def cancel(self) -> None:
        if self._current is not None:
            self._current.cancel()

    async def wait(self) -> bool:
        if self._current is None:
            return False
        return await self._current.wait()

    def _write(self, task: Optional[RenderTask], text: str) -> None:
        # Only the current reveal (or the renderer itself) may write
        if task is not None and task is not self._current:
            return
        self._buffer = text
        if self.on_display is not None:
            self.on_display(text)
