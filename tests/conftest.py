"""Test fixtures for sonosync tests."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from typing import Any, Self

import pytest

from sonosync.api.events import DeviceEvent
from sonosync.api.session import DisconnectHandler, EventHandler
from sonosync.core.registry import PropertyRegistry
from sonosync.core.synchronizer import StateSynchronizer
from sonosync.models.playback import TrackMetadata
from sonosync.models.topology import GroupTopology, Zone, ZoneMember


class FakeSession:
    """In-memory device session recording every command."""

    def __init__(self, address: str = "192.168.1.10") -> None:
        self._address = address
        self.connected = False
        self.name = "Living Room"
        self.volume = 30
        self.state = "playing"
        self.track = TrackMetadata("A", "Artist A", "Album A", duration=200, position=50)
        self.play_mode = "NORMAL"
        self.crossfade = False
        self.supports_fixed_volume = False
        self.fixed_volume = False
        self.local_id = "RINCON_A01400"
        self.topology = GroupTopology()
        self.subscribed_volume: bool | None = None
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.failures: dict[str, Exception] = {}
        self.peers: dict[str, FakeSession] = {}
        self.on_event: EventHandler | None = None
        self.on_disconnect: DisconnectHandler | None = None

    @property
    def address(self) -> str:
        return self._address

    @property
    def is_connected(self) -> bool:
        return self.connected

    @property
    def commands(self) -> list[str]:
        """Return the names of recorded calls."""
        return [name for name, _ in self.calls]

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.failures:
            raise self.failures[name]

    def set_event_handlers(
        self,
        on_event: EventHandler | None = None,
        on_disconnect: DisconnectHandler | None = None,
    ) -> None:
        self.on_event = on_event
        self.on_disconnect = on_disconnect

    def emit(self, event: DeviceEvent) -> None:
        """Deliver a push event to the registered handler."""
        assert self.on_event is not None
        self.on_event(event)

    def drop_subscription(self) -> None:
        """Simulate a subscription that failed to renew."""
        self.connected = False
        if self.on_disconnect:
            self.on_disconnect()

    async def subscribe(self, *, volume: bool = True) -> None:
        self._record("subscribe", volume)
        self.subscribed_volume = volume
        self.connected = True

    async def close(self) -> None:
        self._record("close")
        self.connected = False

    def peer(self, address: str) -> Self:
        if address not in self.peers:
            self.peers[address] = type(self)(address)
        return self.peers[address]  # type: ignore[return-value]

    async def get_name(self) -> str:
        self._record("get_name")
        return self.name

    async def get_volume(self) -> int:
        self._record("get_volume")
        return self.volume

    async def get_current_state(self) -> str:
        self._record("get_current_state")
        return self.state

    async def current_track(self) -> TrackMetadata:
        self._record("current_track")
        return self.track

    async def get_play_mode(self) -> str:
        self._record("get_play_mode")
        return self.play_mode

    async def get_all_groups(self) -> GroupTopology:
        self._record("get_all_groups")
        return self.topology

    async def get_local_id(self) -> str:
        self._record("get_local_id")
        return self.local_id

    async def get_supports_fixed_volume(self) -> bool:
        self._record("get_supports_fixed_volume")
        return self.supports_fixed_volume

    async def get_fixed_volume(self) -> bool:
        self._record("get_fixed_volume")
        return self.fixed_volume

    async def get_crossfade_mode(self) -> bool:
        self._record("get_crossfade_mode")
        return self.crossfade

    async def play(self) -> None:
        self._record("play")

    async def pause(self) -> None:
        self._record("pause")

    async def set_volume(self, volume: int) -> None:
        self._record("set_volume", volume)

    async def set_play_mode(self, mode: str) -> None:
        self._record("set_play_mode", mode)

    async def set_crossfade_mode(self, enabled: bool) -> None:
        self._record("set_crossfade_mode", enabled)

    async def seek(self, position: int) -> None:
        self._record("seek", position)

    async def next(self) -> None:
        self._record("next")

    async def previous(self) -> None:
        self._record("previous")

    async def leave_group(self) -> None:
        self._record("leave_group")

    async def join_group(self, target_name: str) -> None:
        self._record("join_group", target_name)


def make_topology() -> GroupTopology:
    """Return a topology with A+B grouped (A coordinating) and C alone.

    A is the local speaker.
    """
    a = ZoneMember("RINCON_A01400", "Living Room", "192.168.1.10")
    b = ZoneMember("RINCON_B01400", "Kitchen", "192.168.1.11")
    c = ZoneMember("RINCON_C01400", "Bedroom", "192.168.1.12")
    return GroupTopology(
        zones=(
            Zone("RINCON_A01400:1", "RINCON_A01400", (a, b)),
            Zone("RINCON_C01400:7", "RINCON_C01400", (c,)),
        )
    )


@pytest.fixture
def session() -> FakeSession:
    """Return a fresh fake session."""
    return FakeSession()


@pytest.fixture
def registry() -> PropertyRegistry:
    """Return an empty property registry."""
    return PropertyRegistry()


@pytest.fixture
def sync(session: FakeSession, registry: PropertyRegistry) -> StateSynchronizer:
    """Return a synchronizer with registered properties."""
    synchronizer = StateSynchronizer(session, registry)
    synchronizer.register_properties()
    return synchronizer


@pytest.fixture
def changes(registry: PropertyRegistry) -> list[tuple[str, Any]]:
    """Record every property_changed emission of the registry."""
    recorded: list[tuple[str, Any]] = []
    registry.property_changed.connect(lambda key, value: recorded.append((key, value)))
    return recorded
