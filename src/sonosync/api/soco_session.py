"""Device session backed by SoCo.

SoCo's calls are blocking UPnP requests, so they run in a thread pool and
are awaited from the event loop. Push events use SoCo's asyncio event
listener.
"""

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import Executor
from contextlib import suppress
from typing import Any, Self, TypeVar

import aiohttp
import soco
from soco import SoCo, events_asyncio
from soco.exceptions import SoCoException, SoCoUPnPException

from sonosync.api.events import (
    DeviceEvent,
    PlaybackStopped,
    PlayStateChanged,
    TransportStateChanged,
    VolumeChanged,
)
from sonosync.api.session import DisconnectHandler, EventHandler, RetryPolicy
from sonosync.errors import InvalidOperationError, RemoteCallError
from sonosync.models.playback import TrackMetadata
from sonosync.models.topology import GroupTopology, Zone, ZoneMember

soco.config.EVENTS_MODULE = events_asyncio

logger = logging.getLogger(__name__)

T = TypeVar("T")

# AVTransport transport states mapped to play state names
_TRANSPORT_STATES: dict[str, str] = {
    "PLAYING": "playing",
    "PAUSED_PLAYBACK": "paused",
    "STOPPED": "stopped",
    "TRANSITIONING": "transitioning",
}

_SERVICE_AV_TRANSPORT = "AVTransport"
_SERVICE_RENDERING_CONTROL = "RenderingControl"

# Timecodes are H:MM:SS or MM:SS
_TIMECODE_PARTS = (2, 3)


def parse_timecode(value: object) -> int | None:
    """Parse a UPnP timecode ("0:03:20") into seconds.

    Args:
        value: Timecode string from the device.

    Returns:
        Seconds, or None if the value is missing or not a timecode
        (e.g. "NOT_IMPLEMENTED" for streams).
    """
    if not isinstance(value, str) or not value:
        return None
    parts = value.split(":")
    if len(parts) not in _TIMECODE_PARTS:
        return None
    try:
        seconds = 0
        for part in parts:
            seconds = seconds * 60 + int(part)
    except ValueError:
        return None
    return seconds


def format_timecode(seconds: int) -> str:
    """Format seconds as an H:MM:SS timecode."""
    hours, remainder = divmod(max(0, seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def _track_from_metadata(metadata: object, duration: object) -> TrackMetadata | None:
    """Build TrackMetadata from a DIDL object delivered in an event."""
    if metadata is None or metadata == "":
        return None
    return TrackMetadata(
        title=str(getattr(metadata, "title", "") or ""),
        artist=str(getattr(metadata, "creator", "") or ""),
        album=str(getattr(metadata, "album", "") or ""),
        duration=parse_timecode(duration),
    )


def _member_from_device(device: Any) -> ZoneMember:
    """Convert a SoCo zone member into a ZoneMember."""
    return ZoneMember(
        uid=device.uid,
        zone_name=device.player_name,
        address=device.ip_address,
        visible=bool(device.is_visible),
    )


def translate_event(service_type: str, variables: dict[str, Any]) -> list[DeviceEvent]:
    """Translate SoCo event variables into device events.

    Args:
        service_type: UPnP service that sent the event.
        variables: Parsed event variables.

    Returns:
        Device events in the order they should be applied.
    """
    events: list[DeviceEvent] = []

    if service_type == _SERVICE_RENDERING_CONTROL:
        volume = variables.get("volume")
        if isinstance(volume, dict) and "Master" in volume:
            with suppress(TypeError, ValueError):
                events.append(VolumeChanged(int(volume["Master"])))
        return events

    if service_type != _SERVICE_AV_TRANSPORT:
        return events

    transport_state = variables.get("transport_state")
    if transport_state == "STOPPED":
        events.append(PlaybackStopped())
    elif isinstance(transport_state, str):
        events.append(PlayStateChanged(_TRANSPORT_STATES.get(transport_state, transport_state.lower())))

    if "current_play_mode" in variables or "current_track_meta_data" in variables:
        crossfade = variables.get("current_crossfade_mode")
        events.append(
            TransportStateChanged(
                play_mode=variables.get("current_play_mode"),
                crossfade=None if crossfade is None else str(crossfade),
                track=_track_from_metadata(
                    variables.get("current_track_meta_data"),
                    variables.get("current_track_duration"),
                ),
            )
        )
    return events


async def shutdown_event_listener() -> None:
    """Stop SoCo's shared asyncio event listener."""
    listener = events_asyncio.event_listener
    if listener.is_running:
        await listener.async_stop()


class SocoSession:
    """Async device session for a single Sonos speaker.

    Example:
        session = SocoSession("192.168.1.50")
        session.set_event_handlers(on_event=print)
        await session.subscribe()
        print(await session.get_name())
        await session.close()
    """

    def __init__(
        self,
        address: str,
        retry_policy: RetryPolicy | None = None,
        executor: Executor | None = None,
        device: Any = None,
    ) -> None:
        """Initialize the session.

        Args:
            address: IP address of the speaker.
            retry_policy: Retry/timeout policy for remote calls.
            executor: Executor for blocking SoCo calls (default loop executor).
            device: Pre-built SoCo instance, mainly for tests.
        """
        self._address = address
        self._policy = retry_policy or RetryPolicy()
        self._executor = executor
        self._device = device if device is not None else SoCo(address)
        self._subscriptions: list[Any] = []
        self._connected = False

        self._on_event: EventHandler | None = None
        self._on_disconnect: DisconnectHandler | None = None

    @property
    def address(self) -> str:
        """Return the speaker's address."""
        return self._address

    @property
    def is_connected(self) -> bool:
        """Return True while push subscriptions are live."""
        return self._connected

    def set_event_handlers(
        self,
        on_event: EventHandler | None = None,
        on_disconnect: DisconnectHandler | None = None,
    ) -> None:
        """Set handlers for push events and subscription loss.

        Args:
            on_event: Handler for translated device events.
            on_disconnect: Handler called when a subscription cannot be renewed.
        """
        self._on_event = on_event
        self._on_disconnect = on_disconnect

    def peer(self, address: str) -> Self:
        """Return a session for another speaker sharing this session's policy."""
        return type(self)(address, self._policy, self._executor)

    async def _call(self, operation: str, fn: Callable[[], T]) -> T:
        """Run a blocking SoCo call under the retry policy."""
        loop = asyncio.get_running_loop()

        def invoke() -> T:
            try:
                return fn()
            except SoCoUPnPException as e:
                # The device rejected the request; retrying will not help
                raise RemoteCallError(operation, 1, str(e)) from e
            except SoCoException as e:
                raise ConnectionError(str(e)) from e

        logger.debug("Calling %s on %s", operation, self._address)
        return await self._policy.run(operation, lambda: loop.run_in_executor(self._executor, invoke))

    async def _subscribe_service(self, service: Any) -> Any:
        try:
            return await service.subscribe(auto_renew=True)
        except (SoCoException, aiohttp.ClientError) as e:
            raise ConnectionError(str(e)) from e

    async def subscribe(self, *, volume: bool = True) -> None:
        """Subscribe to push events.

        Args:
            volume: Also subscribe to volume events. False for fixed-output
                speakers.

        Raises:
            RemoteCallError: If a subscription cannot be established.
        """
        services = [self._device.avTransport]
        if volume:
            services.append(self._device.renderingControl)

        for service in services:
            subscription = await self._policy.run(
                f"subscribe {service.service_type}",
                lambda service=service: self._subscribe_service(service),
            )
            subscription.callback = self._handle_event
            subscription.auto_renew_fail = self._handle_renew_failure
            self._subscriptions.append(subscription)

        self._connected = True
        logger.debug("Subscribed to %d service(s) on %s", len(services), self._address)

    async def close(self) -> None:
        """Cancel all push subscriptions."""
        self._connected = False
        for subscription in self._subscriptions:
            try:
                await subscription.unsubscribe()
            except (SoCoException, aiohttp.ClientError, OSError) as e:
                logger.debug("Unsubscribe failed on %s: %s", self._address, e)
        self._subscriptions.clear()

    def _handle_event(self, event: Any) -> None:
        """Translate a SoCo event and pass it to the handler."""
        service_type = getattr(event.service, "service_type", "")
        for device_event in translate_event(service_type, dict(event.variables)):
            logger.debug("Event from %s: %s", self._address, device_event)
            if self._on_event:
                self._on_event(device_event)

    def _handle_renew_failure(self, error: Exception) -> None:
        """Report a lost subscription."""
        logger.warning("Event subscription on %s could not be renewed: %s", self._address, error)
        self._connected = False
        if self._on_disconnect:
            self._on_disconnect()

    # Queries

    async def get_name(self) -> str:
        """Return the speaker's room name."""
        return await self._call("get_name", lambda: self._device.player_name)

    async def get_volume(self) -> int:
        """Return master volume (0-100)."""
        return await self._call("get_volume", lambda: int(self._device.volume))

    async def get_current_state(self) -> str:
        """Return the play state ("playing", "paused", "stopped", ...)."""
        info = await self._call("get_current_state", self._device.get_current_transport_info)
        state = str(info.get("current_transport_state", ""))
        return _TRANSPORT_STATES.get(state, state.lower())

    async def current_track(self) -> TrackMetadata:
        """Return metadata, duration and position of the current track."""
        info = await self._call("current_track", self._device.get_current_track_info)
        return TrackMetadata(
            title=info.get("title", "") or "",
            artist=info.get("artist", "") or "",
            album=info.get("album", "") or "",
            duration=parse_timecode(info.get("duration")),
            position=parse_timecode(info.get("position")),
        )

    async def get_play_mode(self) -> str:
        """Return the native play mode."""
        return await self._call("get_play_mode", lambda: self._device.play_mode)

    async def get_all_groups(self) -> GroupTopology:
        """Return all zone groups, ordered by group id."""

        def read_groups() -> GroupTopology:
            zones: list[Zone] = []
            for group in self._device.all_groups:
                members = sorted(
                    (_member_from_device(m) for m in group.members), key=lambda m: m.uid
                )
                zones.append(
                    Zone(id=group.uid, coordinator_id=group.coordinator.uid, members=tuple(members))
                )
            zones.sort(key=lambda z: z.id)
            return GroupTopology(zones=tuple(zones))

        return await self._call("get_all_groups", read_groups)

    async def get_local_id(self) -> str:
        """Return this speaker's uid."""
        return await self._call("get_local_id", lambda: self._device.uid)

    async def get_supports_fixed_volume(self) -> bool:
        """Return True if the speaker supports a fixed output level."""
        return await self._call(
            "get_supports_fixed_volume", lambda: bool(self._device.supports_fixed_volume)
        )

    async def get_fixed_volume(self) -> bool:
        """Return True if the output level is currently fixed."""
        return await self._call("get_fixed_volume", lambda: bool(self._device.fixed_volume))

    async def get_crossfade_mode(self) -> bool:
        """Return True if crossfade is enabled."""
        return await self._call("get_crossfade_mode", lambda: bool(self._device.cross_fade))

    # Commands

    async def play(self) -> None:
        """Start playback."""
        await self._call("play", self._device.play)

    async def pause(self) -> None:
        """Pause playback."""
        await self._call("pause", self._device.pause)

    async def set_volume(self, volume: int) -> None:
        """Set master volume (0-100)."""
        await self._call("set_volume", lambda: setattr(self._device, "volume", int(volume)))

    async def set_play_mode(self, mode: str) -> None:
        """Set the native play mode."""
        await self._call("set_play_mode", lambda: setattr(self._device, "play_mode", mode))

    async def set_crossfade_mode(self, enabled: bool) -> None:
        """Enable or disable crossfade."""
        await self._call("set_crossfade_mode", lambda: setattr(self._device, "cross_fade", enabled))

    async def seek(self, position: int) -> None:
        """Seek to position (seconds) in the current track."""
        timecode = format_timecode(position)
        await self._call("seek", lambda: self._device.seek(timecode))

    async def next(self) -> None:
        """Skip to the next track."""
        await self._call("next", self._device.next)

    async def previous(self) -> None:
        """Go back to the previous track."""
        await self._call("previous", self._device.previous)

    async def leave_group(self) -> None:
        """Remove this speaker from its group."""
        await self._call("leave_group", self._device.unjoin)

    async def join_group(self, target_name: str) -> None:
        """Join the group of the speaker named target_name.

        Raises:
            InvalidOperationError: If no speaker has that name.
        """

        def join() -> None:
            for zone in self._device.all_zones:
                if zone.player_name == target_name:
                    self._device.join(zone)
                    return
            raise InvalidOperationError(f"No speaker named {target_name!r}")

        await self._call("join_group", join)
