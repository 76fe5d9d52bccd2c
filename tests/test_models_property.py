"""Tests for property descriptors."""

from sonosync.models.property import Property, PropertyDescriptor, PropertyType


class TestPropertyDescriptor:
    """Tests for PropertyDescriptor."""

    def test_boolean_accepts_only_bools(self) -> None:
        """Test boolean descriptors reject truthy non-bools."""
        descriptor = PropertyDescriptor("Playing", PropertyType.BOOLEAN)
        assert descriptor.accepts(True)
        assert not descriptor.accepts(1)
        assert not descriptor.accepts("true")

    def test_number_range(self) -> None:
        """Test numeric bounds are enforced."""
        descriptor = PropertyDescriptor("Volume", PropertyType.NUMBER, minimum=0, maximum=100)
        assert descriptor.accepts(0)
        assert descriptor.accepts(55.5)
        assert descriptor.accepts(100)
        assert not descriptor.accepts(-1)
        assert not descriptor.accepts(101)

    def test_number_rejects_bool(self) -> None:
        """Test bools are not treated as numbers."""
        descriptor = PropertyDescriptor("Volume", PropertyType.NUMBER)
        assert not descriptor.accepts(True)

    def test_enum_values(self) -> None:
        """Test enum descriptors only accept listed values."""
        descriptor = PropertyDescriptor(
            "Repeat", PropertyType.STRING, enum_values=("None", "One", "All")
        )
        assert descriptor.is_enum
        assert descriptor.accepts("One")
        assert not descriptor.accepts("Twice")

    def test_as_read_only(self) -> None:
        """Test as_read_only returns a read-only copy."""
        descriptor = PropertyDescriptor("Volume", PropertyType.NUMBER)
        read_only = descriptor.as_read_only()
        assert read_only.read_only
        assert not descriptor.read_only
        assert read_only.label == "Volume"

    def test_to_dict(self) -> None:
        """Test conversion to a JSON description."""
        descriptor = PropertyDescriptor(
            "Volume",
            PropertyType.NUMBER,
            "LevelProperty",
            unit="percent",
            read_only=True,
            minimum=0,
            maximum=100,
        )
        assert descriptor.to_dict() == {
            "title": "Volume",
            "type": "number",
            "@type": "LevelProperty",
            "unit": "percent",
            "readOnly": True,
            "minimum": 0,
            "maximum": 100,
        }

    def test_to_dict_enum(self) -> None:
        """Test enum values appear in the description."""
        descriptor = PropertyDescriptor("Repeat", PropertyType.STRING, enum_values=("None", "All"))
        assert descriptor.to_dict()["enum"] == ["None", "All"]


class TestProperty:
    """Tests for Property."""

    def test_read_only_alias(self) -> None:
        """Test read_only mirrors the descriptor."""
        prop = Property(
            "track", PropertyDescriptor("Track", PropertyType.STRING, read_only=True), ""
        )
        assert prop.read_only
