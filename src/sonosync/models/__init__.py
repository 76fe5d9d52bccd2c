"""Data models for speaker properties, playback, topology and actions."""

from sonosync.models.action import Action, ActionSchema, ActionStatus, BooleanField
from sonosync.models.play_mode import PlayMode, RepeatMode, decode_play_mode, encode_play_mode
from sonosync.models.playback import PlaybackSnapshot, TrackMetadata
from sonosync.models.property import Property, PropertyDescriptor, PropertyType
from sonosync.models.topology import GroupTopology, Zone, ZoneMember

__all__ = [
    "Action",
    "ActionSchema",
    "ActionStatus",
    "BooleanField",
    "GroupTopology",
    "PlayMode",
    "PlaybackSnapshot",
    "Property",
    "PropertyDescriptor",
    "PropertyType",
    "RepeatMode",
    "TrackMetadata",
    "Zone",
    "ZoneMember",
    "decode_play_mode",
    "encode_play_mode",
]
