"""Local estimate of playback position between device updates.

Speakers do not push position changes while a track plays, so the
position is advanced locally once per tick and replaced whenever the
device reports an authoritative value.
"""

import asyncio
import logging
from collections.abc import Callable
from contextlib import suppress
from enum import StrEnum

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = 1.0  # seconds
PROGRESS_PRECISION = 2  # decimal places of published progress


class InterpolatorState(StrEnum):
    """Whether the local clock is running."""

    IDLE = "idle"
    TICKING = "ticking"


def compute_progress(position: float, duration: float) -> float:
    """Return position as a percentage of duration, clamped to [0, 100]."""
    if duration <= 0:
        return 0.0
    progress = position / duration * 100
    return round(max(0.0, min(100.0, progress)), PROGRESS_PRECISION)


class ProgressInterpolator:
    """Ticks a local position and publishes progress.

    At most one tick task is alive at a time. Every path that ends or
    replaces playback must call ``stop``.

    Example:
        interpolator = ProgressInterpolator(lambda p: print(f"{p}%"))
        interpolator.resync(position=50, duration=200)
        interpolator.start()  # publishes 25.5, 26.0, ... once per second
    """

    def __init__(
        self,
        publish: Callable[[float], object],
        interval: float = DEFAULT_TICK_INTERVAL,
    ) -> None:
        """Initialize the interpolator.

        Args:
            publish: Called with the new progress percentage.
            interval: Seconds between ticks.
        """
        self._publish = publish
        self._interval = interval
        self._duration = 0
        self._position = 0
        self._last_published: float | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> InterpolatorState:
        """Return the current state."""
        return InterpolatorState.TICKING if self._task is not None else InterpolatorState.IDLE

    @property
    def is_ticking(self) -> bool:
        """Return True while the tick task is alive."""
        return self._task is not None

    @property
    def duration(self) -> int:
        """Return the duration of the current track in seconds."""
        return self._duration

    @property
    def position(self) -> int:
        """Return the estimated position in seconds."""
        return self._position

    @property
    def progress(self) -> float:
        """Return the estimated progress percentage."""
        return compute_progress(self._position, self._duration)

    def resync(self, position: int | None = None, duration: int | None = None) -> None:
        """Replace the local estimate with authoritative values.

        Args:
            position: New position in seconds, unchanged if None.
            duration: New duration in seconds, unchanged if None.
        """
        if duration is not None:
            self._duration = max(0, duration)
        if position is not None:
            self._position = max(0, position)
        self._last_published = self.progress

    def clear(self) -> None:
        """Forget the current track and stop ticking."""
        self.stop()
        self._duration = 0
        self._position = 0
        self._last_published = 0.0

    def start(self) -> bool:
        """Start ticking if no tick task is alive and the duration is known.

        Must be called from within a running event loop.

        Returns:
            True if a tick task was started.
        """
        if self._task is not None or self._duration <= 0:
            return False
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug("Progress interpolation started at %ds/%ds", self._position, self._duration)
        return True

    def stop(self) -> None:
        """Cancel the tick task, if any."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            logger.debug("Progress interpolation stopped at %ds", self._position)

    def tick(self) -> None:
        """Advance the position by one second and publish if progress moved."""
        self._position += 1
        progress = self.progress
        if progress != self._last_published:
            self._last_published = progress
            self._publish(progress)

    async def _run(self) -> None:
        with suppress(asyncio.CancelledError):
            while True:
                await asyncio.sleep(self._interval)
                self.tick()
