"""Action schema and invocation models."""

import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


@dataclass(frozen=True, slots=True)
class BooleanField:
    """A boolean input field of an action schema."""

    name: str
    default: bool = False


@dataclass(frozen=True, slots=True)
class ActionSchema:
    """Description of an action and the input it accepts.

    Attributes:
        name: Action name used to invoke it.
        label: Human-readable label.
        description: Longer description.
        fields: Input fields in display order. Empty for zero-argument actions.
    """

    name: str
    label: str
    description: str = ""
    fields: tuple[BooleanField, ...] = field(default_factory=tuple)

    @property
    def field_names(self) -> list[str]:
        """Return the input field names in order."""
        return [f.name for f in self.fields]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable description."""
        result: dict[str, Any] = {"title": self.label, "description": self.description}
        if self.fields:
            result["input"] = {
                "type": "object",
                "required": self.field_names,
                "properties": {
                    f.name: {"type": "boolean", "default": f.default} for f in self.fields
                },
            }
        return result


class ActionStatus(StrEnum):
    """Lifecycle state of an action invocation."""

    CREATED = "created"
    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(slots=True)
class Action:
    """A single invocation of an action.

    An action that fails while being performed stays ``PENDING``; only a
    successful run reaches ``COMPLETED``.
    """

    name: str
    input: dict[str, Any] = field(default_factory=dict)
    status: ActionStatus = ActionStatus.CREATED
    time_requested: float = field(default_factory=time.time)
    time_completed: float | None = None

    def start(self) -> None:
        """Mark the action as running."""
        self.status = ActionStatus.PENDING

    def finish(self) -> None:
        """Mark the action as completed."""
        self.status = ActionStatus.COMPLETED
        self.time_completed = time.time()
