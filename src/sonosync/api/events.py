"""Push events delivered by a device session."""

from dataclasses import dataclass

from sonosync.models.playback import TrackMetadata


@dataclass(frozen=True, slots=True)
class PlayStateChanged:
    """The transport state changed (e.g. "playing", "paused")."""

    state: str

    @property
    def is_playing(self) -> bool:
        """Return True if the new state is "playing"."""
        return self.state == "playing"


@dataclass(frozen=True, slots=True)
class PlaybackStopped:
    """Playback stopped."""


@dataclass(frozen=True, slots=True)
class TransportStateChanged:
    """AVTransport state variables changed.

    Attributes:
        play_mode: Native play mode string, if reported.
        crossfade: Raw crossfade field ("0" or "1"), if reported.
        track: Parsed track metadata, or None if no track is loaded.
    """

    play_mode: str | None = None
    crossfade: str | None = None
    track: TrackMetadata | None = None


@dataclass(frozen=True, slots=True)
class VolumeChanged:
    """Master volume changed (0-100)."""

    volume: int


DeviceEvent = PlayStateChanged | PlaybackStopped | TransportStateChanged | VolumeChanged
