"""
Render loop driven by a once-per-frame callback scheduler.
"""

import functools
import itertools
import logging
from enum import Enum
from typing import Callable, Dict

logger = logging.getLogger(__name__)


class FrameScheduler:
    """
    Display-refresh callback queue.

    ``request_frame`` arms a callback for the next refresh. ``dispatch`` is
    called by the host once per displayed frame and runs only the callbacks
    armed before it started; callbacks armed during a dispatch wait for the
    next one.
    """

    def __init__(self):
        self._callbacks: Dict[int, Callable[[float], None]] = {}
        self._ids = itertools.count(1)

    def request_frame(self, callback: Callable[[float], None]) -> int:
        handle = next(self._ids)
        self._callbacks[handle] = callback
        return handle

    def cancel_frame(self, handle: int):
        self._callbacks.pop(handle, None)

    def dispatch(self, now_ms: float) -> int:
        """
        Run the callbacks armed for this frame.

        Args:
            now_ms: Frame timestamp in milliseconds handed to every callback

        Returns:
            Number of callbacks run
        """
        armed = self._callbacks
        self._callbacks = {}
        for callback in armed.values():
            callback(now_ms)
        return len(armed)

    @property
    def pending(self) -> int:
        return len(self._callbacks)


class LoopState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class RenderLoop:
    """Calls ``on_frame`` once per scheduler frame while running."""

    def __init__(self, scheduler: FrameScheduler, on_frame: Callable[[float], None]):
        """
        Initialize the render loop.

        Args:
            scheduler: Display-refresh scheduler the loop re-arms itself on
            on_frame: Called with the frame timestamp in milliseconds
        """
        self.scheduler = scheduler
        self.on_frame = on_frame
        self.state = LoopState.IDLE
        self.frame_count = 0
        self._generation = 0

    @property
    def is_running(self) -> bool:
        return self.state is LoopState.RUNNING

    def start(self):
        if self.is_running:
            logger.warning("Render loop already running")
            return
        self.state = LoopState.RUNNING
        # Ticks armed by an earlier run must not join this one
        self._generation += 1
        logger.info("Render loop started")
        self._arm()

    def stop(self):
        if not self.is_running:
            return
        self.state = LoopState.IDLE
        logger.info(f"Render loop stopped after {self.frame_count} frames")

    def _arm(self):
        self.scheduler.request_frame(
            functools.partial(self._tick, self._generation))

    def _tick(self, generation: int, now_ms: float):
        # A tick armed before stop() may still fire: it must neither draw nor re-arm
        if not self.is_running or generation != self._generation:
            return

        self.on_frame(now_ms)
        self.frame_count += 1

        if self.is_running and generation == self._generation:
            self._arm()
