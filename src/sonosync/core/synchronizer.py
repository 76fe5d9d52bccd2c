"""Two-way synchronization between a speaker and its property registry.

Device events and poll results flow into the registry; property writes
flow out as device commands. Handlers for one speaker run on a single
event loop, so no locking is needed.
"""

import logging
import math
from collections.abc import Awaitable, Callable
from typing import Any

from sonosync.api.events import (
    DeviceEvent,
    PlaybackStopped,
    PlayStateChanged,
    TransportStateChanged,
    VolumeChanged,
)
from sonosync.api.session import DeviceSession
from sonosync.core.interpolator import DEFAULT_TICK_INTERVAL, ProgressInterpolator
from sonosync.core.registry import PropertyRegistry
from sonosync.errors import InvalidOperationError
from sonosync.models.play_mode import RepeatMode, decode_play_mode, encode_play_mode
from sonosync.models.playback import PlaybackSnapshot
from sonosync.models.property import PropertyDescriptor, PropertyType

logger = logging.getLogger(__name__)

# Property keys
VOLUME = "volume"
PLAYING = "playing"
SHUFFLE = "shuffle"
REPEAT = "repeat"
CROSSFADE = "crossfade"
TRACK = "track"
ALBUM = "album"
ARTIST = "artist"
PROGRESS = "progress"

PROPERTY_DESCRIPTORS: dict[str, tuple[PropertyDescriptor, Any]] = {
    VOLUME: (
        PropertyDescriptor(
            "Volume", PropertyType.NUMBER, "LevelProperty", unit="percent", minimum=0, maximum=100
        ),
        100,
    ),
    PLAYING: (PropertyDescriptor("Play/Pause", PropertyType.BOOLEAN, "BooleanProperty"), False),
    SHUFFLE: (PropertyDescriptor("Shuffle", PropertyType.BOOLEAN, "BooleanProperty"), False),
    REPEAT: (
        PropertyDescriptor(
            "Repeat",
            PropertyType.STRING,
            "EnumProperty",
            enum_values=tuple(m.value for m in RepeatMode),
        ),
        RepeatMode.NONE.value,
    ),
    CROSSFADE: (PropertyDescriptor("Crossfade", PropertyType.BOOLEAN, "BooleanProperty"), False),
    TRACK: (PropertyDescriptor("Track", PropertyType.STRING, "StringProperty", read_only=True), ""),
    ALBUM: (PropertyDescriptor("Album", PropertyType.STRING, "StringProperty", read_only=True), ""),
    ARTIST: (
        PropertyDescriptor("Artist", PropertyType.STRING, "StringProperty", read_only=True),
        "",
    ),
    PROGRESS: (
        PropertyDescriptor(
            "Progress", PropertyType.NUMBER, "LevelProperty", unit="percent", minimum=0, maximum=100
        ),
        0,
    ),
}


class StateSynchronizer:
    """Maps speaker state onto registry properties and back.

    Example:
        sync = StateSynchronizer(session, registry)
        sync.register_properties(fixed_volume=False)
        await sync.apply_device_event(PlayStateChanged("playing"))
        await sync.apply_property_write("volume", 30)
    """

    def __init__(
        self,
        session: DeviceSession,
        registry: PropertyRegistry,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            session: Session of the speaker to synchronize.
            registry: Registry holding the speaker's properties.
            tick_interval: Seconds between progress interpolation ticks.
        """
        self._session = session
        self._registry = registry
        self._interpolator = ProgressInterpolator(self._publish_progress, tick_interval)
        self._fixed_volume = False
        self._write_handlers: dict[str, Callable[[Any], Awaitable[Any]]] = {
            PLAYING: self._write_playing,
            VOLUME: self._write_volume,
            SHUFFLE: self._write_play_mode(SHUFFLE),
            REPEAT: self._write_play_mode(REPEAT),
            CROSSFADE: self._write_crossfade,
            PROGRESS: self._write_progress,
        }

    @property
    def registry(self) -> PropertyRegistry:
        """Return the property registry."""
        return self._registry

    @property
    def interpolator(self) -> ProgressInterpolator:
        """Return the progress interpolator."""
        return self._interpolator

    @property
    def fixed_volume(self) -> bool:
        """Return True if the speaker's output level is fixed."""
        return self._fixed_volume

    def register_properties(self, *, fixed_volume: bool = False) -> None:
        """Register the speaker's properties with their initial values.

        Args:
            fixed_volume: Register volume read-only and ignore volume events.
        """
        self._fixed_volume = fixed_volume
        for key, (descriptor, initial) in PROPERTY_DESCRIPTORS.items():
            if key == VOLUME and fixed_volume:
                descriptor = descriptor.as_read_only()
            self._registry.register(key, descriptor, initial)

    def set_fixed_volume(self, fixed_volume: bool) -> None:
        """Switch the volume property between writable and read-only.

        The current volume value is kept.
        """
        self._fixed_volume = fixed_volume
        descriptor, _ = PROPERTY_DESCRIPTORS[VOLUME]
        if fixed_volume:
            descriptor = descriptor.as_read_only()
        self._registry.register(VOLUME, descriptor, self._registry.value(VOLUME))

    def update_property(self, key: str, value: Any) -> bool:
        """Apply a device-side value to the registry (no-op if unchanged)."""
        return self._registry.update(key, value)

    def _publish_progress(self, progress: float) -> None:
        self.update_property(PROGRESS, progress)

    def _set_progress_from_interpolator(self) -> None:
        self.update_property(PROGRESS, self._interpolator.progress)

    def _clear_track(self) -> None:
        self.update_property(TRACK, "")
        self.update_property(ARTIST, "")
        self.update_property(ALBUM, "")
        self._interpolator.clear()
        self.update_property(PROGRESS, 0)

    def apply_play_mode(self, mode: str | None) -> None:
        """Split a native play mode into the shuffle and repeat properties."""
        shuffle, repeat = decode_play_mode(mode)
        self.update_property(SHUFFLE, shuffle)
        self.update_property(REPEAT, repeat.value)

    def apply_snapshot(self, snapshot: PlaybackSnapshot) -> None:
        """Apply a polled playback snapshot.

        Track fields are only touched when a track with a known duration is
        loaded. Interpolation starts if the speaker is playing.
        """
        self.update_property(PLAYING, snapshot.playing)
        if not snapshot.has_track:
            return
        self.update_property(TRACK, snapshot.title)
        self.update_property(ALBUM, snapshot.album)
        self.update_property(ARTIST, snapshot.artist)
        self._interpolator.resync(position=snapshot.position, duration=snapshot.duration)
        self._set_progress_from_interpolator()
        if snapshot.playing:
            self._interpolator.start()

    async def apply_device_event(self, event: DeviceEvent) -> None:
        """Apply a push event from the speaker.

        Args:
            event: The event to apply.

        Raises:
            RemoteCallError: If the authoritative track query fails.
        """
        if isinstance(event, PlayStateChanged):
            self._on_play_state(event)
        elif isinstance(event, PlaybackStopped):
            self._on_playback_stopped()
        elif isinstance(event, TransportStateChanged):
            await self._on_transport_state(event)
        elif isinstance(event, VolumeChanged):
            self._on_volume(event)
        else:
            logger.debug("Ignoring unknown event %r", event)

    def _on_play_state(self, event: PlayStateChanged) -> None:
        playing = event.is_playing
        self.update_property(PLAYING, playing)
        if playing:
            self._interpolator.start()
        else:
            self._interpolator.stop()

    def _on_playback_stopped(self) -> None:
        self.update_property(PLAYING, False)
        self._interpolator.stop()
        self._interpolator.resync(position=0)
        self.update_property(PROGRESS, 0)

    async def _on_transport_state(self, event: TransportStateChanged) -> None:
        if event.play_mode is not None:
            self.apply_play_mode(event.play_mode)
        if event.crossfade is not None:
            self.update_property(CROSSFADE, event.crossfade != "0")

        track = event.track
        if track is None:
            self._clear_track()
            return

        self.update_property(TRACK, track.title)
        self.update_property(ARTIST, track.artist)
        self.update_property(ALBUM, track.album)

        if track.duration is None:
            # Streams without a duration have no meaningful progress
            self._interpolator.clear()
            self.update_property(PROGRESS, 0)
            return

        self._interpolator.resync(position=track.position, duration=track.duration)
        self._set_progress_from_interpolator()

        # The event carries no reliable position; ask the speaker
        self._interpolator.stop()
        current = await self._session.current_track()
        duration = current.duration or 0
        if duration <= 0:
            self._interpolator.clear()
            self.update_property(PROGRESS, 0)
            return

        self._interpolator.resync(position=current.position or 0, duration=duration)
        self._set_progress_from_interpolator()
        if self._registry.value(PLAYING):
            self._interpolator.start()

    def _on_volume(self, event: VolumeChanged) -> None:
        if self._fixed_volume:
            logger.debug("Ignoring volume event on fixed-output speaker")
            return
        self.update_property(VOLUME, event.volume)

    async def apply_property_write(self, key: str, value: Any) -> bool:
        """Send a property write to the speaker and store the new value.

        Args:
            key: Property key.
            value: Requested value.

        Returns:
            True if the stored value changed (and a notification was emitted).

        Raises:
            RejectedWriteError: If the property is read-only.
            InvalidOperationError: If the value or the current state does
                not allow the write.
            RemoteCallError: If the speaker command fails.
        """
        self._registry.validate_write(key, value)
        handler = self._write_handlers.get(key)
        if handler is None:
            raise InvalidOperationError(f"Property {key!r} cannot be written")
        stored = await handler(value)
        return self.update_property(key, stored)

    async def _write_playing(self, value: bool) -> bool:
        if value:
            await self._session.play()
        else:
            await self._session.pause()
        return value

    async def _write_volume(self, value: float) -> int:
        volume = round(value)
        await self._session.set_volume(volume)
        return volume

    def _write_play_mode(self, key: str) -> Callable[[Any], Awaitable[Any]]:
        async def write(value: Any) -> Any:
            shuffle = value if key == SHUFFLE else self._registry.value(SHUFFLE)
            repeat = value if key == REPEAT else self._registry.value(REPEAT)
            mode = encode_play_mode(shuffle, repeat)
            await self._session.set_play_mode(mode.value)
            return value

        return write

    async def _write_crossfade(self, value: bool) -> bool:
        await self._session.set_crossfade_mode(value)
        return value

    async def _write_progress(self, value: float) -> float:
        duration = self._interpolator.duration
        if duration <= 0:
            raise InvalidOperationError("Can't change progress without a track")
        position = math.floor(value / 100 * duration)
        await self._session.seek(position)
        self._interpolator.resync(position=position)
        return value
