"""Property registry with Qt signals for change notification.

The registry owns every property value of a speaker. Device-side updates
go through ``set_cached_value`` followed by ``notify_changed``; user-side
writes are validated with ``validate_write`` before they are routed to the
device.

This follows the Observer pattern via Qt's signal/slot mechanism.
"""

import logging
from typing import Any

from PySide6.QtCore import QObject, Signal

from sonosync.errors import InvalidOperationError, RejectedWriteError
from sonosync.models.property import Property, PropertyDescriptor

logger = logging.getLogger(__name__)


class PropertyRegistry(QObject):
    """Typed key/value store emitting a Qt signal on changes.

    Example:
        registry = PropertyRegistry()
        registry.register("volume", PropertyDescriptor("Volume", PropertyType.NUMBER), 100)
        registry.property_changed.connect(lambda key, value: print(key, value))
        registry.update("volume", 30)  # emits property_changed("volume", 30)
    """

    # (key, new value)
    property_changed = Signal(str, object)

    def __init__(self, parent: QObject | None = None) -> None:
        """Initialize an empty registry."""
        super().__init__(parent)
        self._descriptors: dict[str, PropertyDescriptor] = {}
        self._values: dict[str, Any] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._descriptors

    @property
    def keys(self) -> list[str]:
        """Return registered keys in registration order."""
        return list(self._descriptors)

    def register(self, key: str, descriptor: PropertyDescriptor, initial_value: Any) -> None:
        """Register a property, replacing any previous registration.

        Args:
            key: Property key.
            descriptor: Static description of the property.
            initial_value: Value before the first device update.
        """
        self._descriptors[key] = descriptor
        self._values[key] = initial_value

    def descriptor(self, key: str) -> PropertyDescriptor:
        """Return the descriptor for key.

        Raises:
            InvalidOperationError: If key is not registered.
        """
        try:
            return self._descriptors[key]
        except KeyError:
            raise InvalidOperationError(f"Unknown property {key!r}") from None

    def get(self, key: str) -> Property:
        """Return the property registered under key.

        Raises:
            InvalidOperationError: If key is not registered.
        """
        return Property(key=key, descriptor=self.descriptor(key), value=self._values[key])

    def value(self, key: str) -> Any:
        """Return the current value of key."""
        return self.get(key).value

    def set_cached_value(self, key: str, value: Any) -> None:
        """Store a value without notifying anyone."""
        self.descriptor(key)
        self._values[key] = value

    def notify_changed(self, key: str) -> None:
        """Emit property_changed for key with its current value."""
        value = self.value(key)
        logger.debug("Property %s changed to %r", key, value)
        self.property_changed.emit(key, value)

    def update(self, key: str, value: Any) -> bool:
        """Store value and notify, unless it equals the current value.

        Args:
            key: Property key.
            value: New value.

        Returns:
            True if the value changed and a notification was emitted.
        """
        if self.value(key) == value:
            return False
        self.set_cached_value(key, value)
        self.notify_changed(key)
        return True

    def validate_write(self, key: str, value: Any) -> PropertyDescriptor:
        """Check that a user-side write of value to key is allowed.

        Args:
            key: Property key.
            value: Proposed value.

        Returns:
            The property's descriptor.

        Raises:
            RejectedWriteError: If the property is read-only.
            InvalidOperationError: If key is unknown or value does not fit.
        """
        descriptor = self.descriptor(key)
        if descriptor.read_only:
            raise RejectedWriteError(key)
        if not descriptor.accepts(value):
            raise InvalidOperationError(f"Invalid value {value!r} for property {key!r}")
        return descriptor

    def to_dict(self) -> dict[str, Any]:
        """Return a snapshot of all values keyed by property key."""
        return dict(self._values)
