"""Property descriptor and value models for the observable speaker model."""

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any, Self


class PropertyType(StrEnum):
    """Value type carried by a property."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"


@dataclass(frozen=True, slots=True)
class PropertyDescriptor:
    """Static description of a property.

    Attributes:
        label: Human-readable label.
        value_type: Type of the value (boolean, number, string).
        semantic_type: Semantic annotation (e.g. "LevelProperty").
        unit: Optional unit (e.g. "percent").
        enum_values: Allowed values for enum properties, empty otherwise.
        read_only: Whether writes are rejected.
        minimum: Lower bound for numeric properties.
        maximum: Upper bound for numeric properties.
    """

    label: str
    value_type: PropertyType
    semantic_type: str = ""
    unit: str = ""
    enum_values: tuple[str, ...] = field(default_factory=tuple)
    read_only: bool = False
    minimum: float | None = None
    maximum: float | None = None

    @property
    def is_enum(self) -> bool:
        """Return True if the property only accepts a fixed set of values."""
        return bool(self.enum_values)

    def as_read_only(self) -> Self:
        """Return a copy of this descriptor that rejects writes."""
        return replace(self, read_only=True)

    def accepts(self, value: Any) -> bool:
        """Return True if value matches the descriptor's type and range."""
        if self.value_type is PropertyType.BOOLEAN:
            return isinstance(value, bool)
        if self.value_type is PropertyType.NUMBER:
            if isinstance(value, bool) or not isinstance(value, int | float):
                return False
            if self.minimum is not None and value < self.minimum:
                return False
            return self.maximum is None or value <= self.maximum
        if not isinstance(value, str):
            return False
        return not self.enum_values or value in self.enum_values

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable description."""
        result: dict[str, Any] = {
            "title": self.label,
            "type": self.value_type.value,
        }
        if self.semantic_type:
            result["@type"] = self.semantic_type
        if self.unit:
            result["unit"] = self.unit
        if self.enum_values:
            result["enum"] = list(self.enum_values)
        if self.read_only:
            result["readOnly"] = True
        if self.minimum is not None:
            result["minimum"] = self.minimum
        if self.maximum is not None:
            result["maximum"] = self.maximum
        return result


@dataclass(frozen=True, slots=True)
class Property:
    """A named property and its current value."""

    key: str
    descriptor: PropertyDescriptor
    value: Any

    @property
    def read_only(self) -> bool:
        """Alias for descriptor.read_only."""
        return self.descriptor.read_only
