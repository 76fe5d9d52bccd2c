"""Device session contract, push events and the SoCo-backed session."""

from sonosync.api.events import (
    DeviceEvent,
    PlaybackStopped,
    PlayStateChanged,
    TransportStateChanged,
    VolumeChanged,
)
from sonosync.api.session import DeviceSession, RetryPolicy
from sonosync.api.soco_session import SocoSession

__all__ = [
    "DeviceEvent",
    "DeviceSession",
    "PlayStateChanged",
    "PlaybackStopped",
    "RetryPolicy",
    "SocoSession",
    "TransportStateChanged",
    "VolumeChanged",
]
