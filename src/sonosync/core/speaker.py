"""Speaker facade tying a device session to its observable model."""

import asyncio
import logging
from contextlib import suppress
from typing import Any

from PySide6.QtCore import QObject, Signal

from sonosync.api.events import DeviceEvent
from sonosync.api.session import DeviceSession
from sonosync.core.actions import ActionDispatcher
from sonosync.core.interpolator import DEFAULT_TICK_INTERVAL
from sonosync.core.registry import PropertyRegistry
from sonosync.core.synchronizer import CROSSFADE, VOLUME, StateSynchronizer
from sonosync.core.topology import GroupTopologyBuilder
from sonosync.errors import SonosyncError
from sonosync.models.action import Action
from sonosync.models.playback import PlaybackSnapshot

logger = logging.getLogger(__name__)


class Speaker(QObject):
    """A speaker's property model, actions and event handling.

    Properties are registered on construction. ``initialize`` polls the
    speaker, builds the group action and subscribes to push events. Push
    events are applied one at a time, in arrival order.

    Example:
        speaker = Speaker(SocoSession("192.168.1.50"))
        speaker.registry.property_changed.connect(print)
        await speaker.initialize()
        await speaker.write_property("volume", 25)
        await speaker.perform_action("next")
    """

    ready = Signal()
    error_occurred = Signal(object)  # Exception

    def __init__(
        self,
        session: DeviceSession,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        parent: QObject | None = None,
    ) -> None:
        """Initialize the speaker.

        Args:
            session: Session of the speaker.
            tick_interval: Seconds between progress interpolation ticks.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._session = session
        self._name = session.address
        self._local_id = ""
        self._ready = False

        self._registry = PropertyRegistry(self)
        self._sync = StateSynchronizer(session, self._registry, tick_interval)
        self._sync.register_properties()
        self._topology = GroupTopologyBuilder(session)
        self._actions = ActionDispatcher(session, self._topology, parent=self)

        self._events: asyncio.Queue[DeviceEvent] = asyncio.Queue()
        self._consumer: asyncio.Task[None] | None = None

    @property
    def name(self) -> str:
        """Return the room name (the address until initialized)."""
        return self._name

    @property
    def local_id(self) -> str:
        """Return the speaker's uid (empty until initialized)."""
        return self._local_id

    @property
    def session(self) -> DeviceSession:
        """Return the device session."""
        return self._session

    @property
    def registry(self) -> PropertyRegistry:
        """Return the property registry."""
        return self._registry

    @property
    def synchronizer(self) -> StateSynchronizer:
        """Return the state synchronizer."""
        return self._sync

    @property
    def actions(self) -> ActionDispatcher:
        """Return the action dispatcher."""
        return self._actions

    @property
    def is_ready(self) -> bool:
        """Return True once initialize has completed."""
        return self._ready

    @property
    def is_connected(self) -> bool:
        """Return True while push events are being received."""
        return self._ready and self._session.is_connected

    async def initialize(self) -> None:
        """Poll the speaker, build actions and subscribe to push events.

        Raises:
            RemoteCallError: If any query or the subscription fails.
        """
        session = self._session
        self._name = await session.get_name()
        self._actions.local_name = self._name

        fixed_volume = False
        if await session.get_supports_fixed_volume():
            fixed_volume = await session.get_fixed_volume()
        self._sync.set_fixed_volume(fixed_volume)
        if not fixed_volume:
            self._sync.update_property(VOLUME, await session.get_volume())

        state = await session.get_current_state()
        track = await session.current_track()
        self._sync.apply_snapshot(
            PlaybackSnapshot(
                playing=state == "playing",
                title=track.title,
                album=track.album,
                artist=track.artist,
                duration=track.duration or 0,
                position=track.position or 0,
            )
        )
        self._sync.apply_play_mode(await session.get_play_mode())
        self._sync.update_property(CROSSFADE, await session.get_crossfade_mode())

        self._local_id = await session.get_local_id()
        self._actions.set_group_schema(await self._topology.build_group_action(self._local_id))

        if self._consumer is None:
            self._consumer = asyncio.get_running_loop().create_task(self._consume_events())
        session.set_event_handlers(on_event=self._enqueue_event, on_disconnect=self._on_disconnect)
        await session.subscribe(volume=not fixed_volume)

        self._ready = True
        logger.info("Speaker %s (%s) ready", self._name, session.address)
        self.ready.emit()

    async def write_property(self, key: str, value: Any) -> bool:
        """Write a property through to the speaker.

        Returns:
            True if the stored value changed.
        """
        return await self._sync.apply_property_write(key, value)

    async def perform_action(self, name: str, action_input: dict[str, Any] | None = None) -> Action:
        """Run one of the speaker's actions."""
        return await self._actions.perform_action(name, action_input)

    async def apply_event(self, event: DeviceEvent) -> None:
        """Apply a single event immediately, bypassing the queue."""
        await self._sync.apply_device_event(event)

    async def drain_events(self) -> None:
        """Wait until every queued event has been applied."""
        await self._events.join()

    def _enqueue_event(self, event: DeviceEvent) -> None:
        self._events.put_nowait(event)

    async def _consume_events(self) -> None:
        while True:
            event = await self._events.get()
            try:
                await self._sync.apply_device_event(event)
            except SonosyncError as e:
                logger.warning("Failed to apply %s on %s: %s", event, self._name, e)
                self.error_occurred.emit(e)
            except Exception as e:
                logger.exception("Unexpected error applying %s on %s", event, self._name)
                self.error_occurred.emit(e)
            finally:
                self._events.task_done()

    def _on_disconnect(self) -> None:
        logger.warning("Lost event subscription for %s", self._name)
        self._sync.interpolator.stop()

    async def close(self) -> None:
        """Stop interpolation and event handling and close the session."""
        self._ready = False
        self._sync.interpolator.stop()
        if self._consumer is not None:
            self._consumer.cancel()
            with suppress(asyncio.CancelledError):
                await self._consumer
            self._consumer = None
        await self._session.close()
