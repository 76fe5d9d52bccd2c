"""Tests for the property registry."""

import pytest
from pytestqt.qtbot import QtBot

from sonosync.core.registry import PropertyRegistry
from sonosync.errors import InvalidOperationError, RejectedWriteError
from sonosync.models.property import PropertyDescriptor, PropertyType

VOLUME = PropertyDescriptor("Volume", PropertyType.NUMBER, minimum=0, maximum=100)
TRACK = PropertyDescriptor("Track", PropertyType.STRING, read_only=True)


@pytest.fixture
def filled(registry: PropertyRegistry) -> PropertyRegistry:
    """Return a registry with volume and track registered."""
    registry.register("volume", VOLUME, 100)
    registry.register("track", TRACK, "")
    return registry


class TestPropertyRegistry:
    """Tests for PropertyRegistry."""

    def test_register(self, filled: PropertyRegistry) -> None:
        """Test registered keys keep their order and value."""
        assert filled.keys == ["volume", "track"]
        assert "volume" in filled
        assert "bass" not in filled
        assert filled.value("volume") == 100

    def test_get_returns_property(self, filled: PropertyRegistry) -> None:
        """Test get bundles key, descriptor and value."""
        prop = filled.get("track")
        assert prop.key == "track"
        assert prop.descriptor is TRACK
        assert prop.read_only

    def test_unknown_key(self, filled: PropertyRegistry) -> None:
        """Test unknown keys raise InvalidOperationError."""
        with pytest.raises(InvalidOperationError, match="bass"):
            filled.value("bass")

    def test_update_emits(self, qtbot: QtBot, filled: PropertyRegistry) -> None:
        """Test a changed value emits property_changed."""
        with qtbot.waitSignal(filled.property_changed, timeout=1000) as blocker:
            assert filled.update("volume", 30)
        assert blocker.args == ["volume", 30]

    def test_update_equal_value_is_silent(self, qtbot: QtBot, filled: PropertyRegistry) -> None:
        """Test an equal value does not notify."""
        with qtbot.assertNotEmitted(filled.property_changed):
            assert not filled.update("volume", 100)

    def test_set_cached_value_is_silent(self, filled: PropertyRegistry) -> None:
        """Test cached writes do not notify until asked to."""
        received: list[tuple[str, object]] = []
        filled.property_changed.connect(lambda k, v: received.append((k, v)))
        filled.set_cached_value("volume", 10)
        assert received == []
        filled.notify_changed("volume")
        assert received == [("volume", 10)]

    def test_validate_read_only(self, filled: PropertyRegistry) -> None:
        """Test writes to read-only properties are rejected."""
        with pytest.raises(RejectedWriteError) as exc_info:
            filled.validate_write("track", "B")
        assert exc_info.value.key == "track"

    def test_validate_value(self, filled: PropertyRegistry) -> None:
        """Test writes must fit the descriptor."""
        assert filled.validate_write("volume", 50) is VOLUME
        with pytest.raises(InvalidOperationError):
            filled.validate_write("volume", "loud")

    def test_register_replaces(self, filled: PropertyRegistry) -> None:
        """Test re-registration replaces descriptor and value."""
        filled.register("volume", VOLUME.as_read_only(), 20)
        assert filled.get("volume").read_only
        assert filled.value("volume") == 20

    def test_to_dict(self, filled: PropertyRegistry) -> None:
        """Test the value snapshot."""
        assert filled.to_dict() == {"volume": 100, "track": ""}
