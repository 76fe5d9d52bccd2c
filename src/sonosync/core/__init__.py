"""Core synchronization logic.

Classes:
    PropertyRegistry: Typed property store with Qt change signals.
    StateSynchronizer: Maps device events and property writes.
    ProgressInterpolator: Local playback position estimate.
    GroupTopologyBuilder: Builds the group action schema.
    ActionDispatcher: Runs speaker actions.
    Speaker: Ties a device session to its model.
    SpeakerWorker: QThread hosting the asyncio loop.
    ConfigManager: QSettings wrapper for configuration.
"""

from sonosync.core.actions import ActionDispatcher
from sonosync.core.config import ConfigManager
from sonosync.core.interpolator import InterpolatorState, ProgressInterpolator
from sonosync.core.registry import PropertyRegistry
from sonosync.core.speaker import Speaker
from sonosync.core.synchronizer import StateSynchronizer
from sonosync.core.topology import GroupTopologyBuilder, build_group_schema
from sonosync.core.worker import SpeakerWorker

__all__ = [
    "ActionDispatcher",
    "ConfigManager",
    "GroupTopologyBuilder",
    "InterpolatorState",
    "ProgressInterpolator",
    "PropertyRegistry",
    "Speaker",
    "SpeakerWorker",
    "StateSynchronizer",
    "build_group_schema",
]
