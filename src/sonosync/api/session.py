"""Device session contract and the retry policy applied at its boundary."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol, Self, TypeVar

from sonosync.api.events import DeviceEvent
from sonosync.errors import RemoteCallError
from sonosync.models.playback import TrackMetadata
from sonosync.models.topology import GroupTopology

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Type aliases for event handlers
EventHandler = Callable[[DeviceEvent], None]
DisconnectHandler = Callable[[], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with exponential delay and a per-attempt timeout.

    Attributes:
        attempts: Total number of attempts (at least 1).
        timeout: Timeout per attempt in seconds.
        delay: Delay before the second attempt; doubled for each further one.
        max_delay: Upper bound for the delay between attempts.
    """

    attempts: int = 3
    timeout: float = 10.0
    delay: float = 0.5
    max_delay: float = 5.0

    def __post_init__(self) -> None:
        """Validate the policy."""
        if self.attempts < 1:
            raise ValueError(f"attempts must be >= 1, got {self.attempts}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")

    async def run(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        """Run call until it succeeds or attempts are exhausted.

        Args:
            operation: Name of the remote operation, for logging and errors.
            call: Zero-argument factory returning a fresh awaitable per attempt.

        Returns:
            The result of the first successful attempt.

        Raises:
            RemoteCallError: If every attempt failed or timed out.
        """
        delay = self.delay
        last_error: Exception | None = None
        for attempt in range(1, self.attempts + 1):
            try:
                return await asyncio.wait_for(call(), timeout=self.timeout)
            except TimeoutError as e:
                last_error = e
                logger.warning("%s timed out (attempt %d/%d)", operation, attempt, self.attempts)
            except (OSError, ConnectionError) as e:
                last_error = e
                logger.warning(
                    "%s failed (attempt %d/%d): %s", operation, attempt, self.attempts, e
                )
            if attempt < self.attempts:
                await asyncio.sleep(delay)
                delay = min(delay * 2, self.max_delay)

        reason = str(last_error) or type(last_error).__name__
        raise RemoteCallError(operation, self.attempts, reason) from last_error


class DeviceSession(Protocol):
    """Live connection to one speaker.

    Queries and commands are coroutines. Push events are delivered to the
    handler registered with ``set_event_handlers`` once ``subscribe`` has
    been awaited.
    """

    @property
    def address(self) -> str: ...

    @property
    def is_connected(self) -> bool: ...

    def set_event_handlers(
        self,
        on_event: EventHandler | None = None,
        on_disconnect: DisconnectHandler | None = None,
    ) -> None: ...

    async def subscribe(self, *, volume: bool = True) -> None: ...

    async def close(self) -> None: ...

    def peer(self, address: str) -> Self: ...

    # Queries

    async def get_name(self) -> str: ...

    async def get_volume(self) -> int: ...

    async def get_current_state(self) -> str: ...

    async def current_track(self) -> TrackMetadata: ...

    async def get_play_mode(self) -> str: ...

    async def get_all_groups(self) -> GroupTopology: ...

    async def get_local_id(self) -> str: ...

    async def get_supports_fixed_volume(self) -> bool: ...

    async def get_fixed_volume(self) -> bool: ...

    async def get_crossfade_mode(self) -> bool: ...

    # Commands

    async def play(self) -> None: ...

    async def pause(self) -> None: ...

    async def set_volume(self, volume: int) -> None: ...

    async def set_play_mode(self, mode: str) -> None: ...

    async def set_crossfade_mode(self, enabled: bool) -> None: ...

    async def seek(self, position: int) -> None: ...

    async def next(self) -> None: ...

    async def previous(self) -> None: ...

    async def leave_group(self) -> None: ...

    async def join_group(self, target_name: str) -> None: ...
