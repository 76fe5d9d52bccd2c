"""Track and playback snapshot models."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TrackMetadata:
    """Metadata for the current track.

    Attributes:
        title: Track title.
        artist: Track artist.
        album: Album name.
        duration: Track duration in seconds, or None if the device did not
            report a usable duration (e.g. radio streams).
        position: Playback position in seconds, or None if unknown.
    """

    title: str = ""
    artist: str = ""
    album: str = ""
    duration: int | None = None
    position: int | None = None


@dataclass(frozen=True, slots=True)
class PlaybackSnapshot:
    """Playback state at a point in time.

    A snapshot with ``duration == 0`` has no active track.
    """

    playing: bool = False
    title: str = ""
    album: str = ""
    artist: str = ""
    duration: int = 0
    position: int = 0

    @property
    def has_track(self) -> bool:
        """Return True if a track with a known duration is loaded."""
        return self.duration > 0

    @property
    def progress(self) -> float:
        """Return the position as a percentage of the duration (0-100)."""
        if self.duration <= 0:
            return 0.0
        return max(0.0, min(100.0, self.position / self.duration * 100))
