"""Play mode mapping between the device's native modes and shuffle/repeat.

The device exposes a single play mode value; the property model splits it
into a shuffle flag and a repeat setting.
"""

from enum import StrEnum

from sonosync.errors import InvalidOperationError


class PlayMode(StrEnum):
    """Native play modes reported by the device."""

    NORMAL = "NORMAL"
    SHUFFLE_NOREPEAT = "SHUFFLE_NOREPEAT"
    SHUFFLE = "SHUFFLE"
    REPEAT_ALL = "REPEAT_ALL"
    SHUFFLE_REPEAT_ONE = "SHUFFLE_REPEAT_ONE"
    REPEAT_ONE = "REPEAT_ONE"


class RepeatMode(StrEnum):
    """Repeat settings exposed by the ``repeat`` property."""

    NONE = "None"
    ONE = "One"
    ALL = "All"


_DECODE: dict[PlayMode, tuple[bool, RepeatMode]] = {
    PlayMode.NORMAL: (False, RepeatMode.NONE),
    PlayMode.SHUFFLE_NOREPEAT: (True, RepeatMode.NONE),
    PlayMode.SHUFFLE: (True, RepeatMode.ALL),
    PlayMode.REPEAT_ALL: (False, RepeatMode.ALL),
    PlayMode.SHUFFLE_REPEAT_ONE: (True, RepeatMode.ONE),
    PlayMode.REPEAT_ONE: (False, RepeatMode.ONE),
}

_ENCODE: dict[tuple[bool, RepeatMode], PlayMode] = {v: k for k, v in _DECODE.items()}


def decode_play_mode(mode: str | None) -> tuple[bool, RepeatMode]:
    """Split a native play mode into (shuffle, repeat).

    Unknown or missing modes decode as (False, None), which is what the
    device reports when no queue is active.

    Args:
        mode: Native play mode string.

    Returns:
        Tuple of shuffle flag and repeat mode.
    """
    try:
        return _DECODE[PlayMode(mode)]
    except ValueError:
        return False, RepeatMode.NONE


def encode_play_mode(shuffle: object, repeat: object) -> PlayMode:
    """Combine shuffle and repeat into a native play mode.

    Args:
        shuffle: Shuffle flag, must be a bool.
        repeat: Repeat setting, one of "None", "One", "All".

    Returns:
        The matching native play mode.

    Raises:
        InvalidOperationError: If the pair has no native mode.
    """
    if not isinstance(shuffle, bool):
        raise InvalidOperationError(f"Shuffle must be a bool, got {shuffle!r}")
    try:
        repeat_mode = RepeatMode(repeat)
    except ValueError:
        raise InvalidOperationError(f"Unknown repeat mode {repeat!r}") from None
    return _ENCODE[(shuffle, repeat_mode)]
