"""Dispatches speaker actions with start/finish lifecycle signals."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from PySide6.QtCore import QObject, Signal

from sonosync.api.session import DeviceSession
from sonosync.core.topology import GROUP_ACTION, GroupTopologyBuilder
from sonosync.errors import InvalidOperationError
from sonosync.models.action import Action, ActionSchema

logger = logging.getLogger(__name__)

NEXT_ACTION = ActionSchema(
    name="next",
    label="Next",
    description="Skip current track and start playing next track in the queue",
)
PREV_ACTION = ActionSchema(
    name="prev",
    label="Previous",
    description="Play previous track in the queue",
)


class ActionDispatcher(QObject):
    """Runs named actions against a speaker.

    Each action is started, performed and finished. If performing fails the
    error propagates, ``action_finished`` is not emitted and the action
    stays pending.

    Example:
        dispatcher = ActionDispatcher(session, builder, local_name="Kitchen")
        dispatcher.action_finished.connect(lambda a: print(f"{a.name} done"))
        await dispatcher.perform_action("next")
    """

    action_started = Signal(object)  # Action
    action_finished = Signal(object)  # Action

    def __init__(
        self,
        session: DeviceSession,
        topology: GroupTopologyBuilder,
        local_name: str = "",
        parent: QObject | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            session: Session of the local speaker.
            topology: Topology builder used by the group action.
            local_name: Room name of the local speaker.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._session = session
        self._topology = topology
        self._local_name = local_name
        self._schemas: dict[str, ActionSchema] = {
            NEXT_ACTION.name: NEXT_ACTION,
            PREV_ACTION.name: PREV_ACTION,
        }
        self._handlers: dict[str, Callable[[Action], Awaitable[None]]] = {
            NEXT_ACTION.name: self._perform_next,
            PREV_ACTION.name: self._perform_prev,
            GROUP_ACTION: self._perform_group,
        }

    @property
    def local_name(self) -> str:
        """Return the room name of the local speaker."""
        return self._local_name

    @local_name.setter
    def local_name(self, name: str) -> None:
        self._local_name = name

    @property
    def schemas(self) -> list[ActionSchema]:
        """Return the schemas of all available actions."""
        return list(self._schemas.values())

    def schema(self, name: str) -> ActionSchema | None:
        """Return the schema of an action, or None if unavailable."""
        return self._schemas.get(name)

    def set_group_schema(self, schema: ActionSchema) -> None:
        """Install (or replace) the group action schema."""
        self._schemas[schema.name] = schema

    async def perform_action(self, name: str, action_input: dict[str, Any] | None = None) -> Action:
        """Run an action to completion.

        Args:
            name: Action name.
            action_input: Input values for actions with a schema.

        Returns:
            The finished action.

        Raises:
            InvalidOperationError: If the action is unknown.
            RemoteCallError: If a speaker command fails.
        """
        handler = self._handlers.get(name)
        if handler is None or name not in self._schemas:
            raise InvalidOperationError(f"Unknown action {name!r}")

        action = Action(name=name, input=dict(action_input or {}))
        action.start()
        self.action_started.emit(action)
        logger.debug("Performing action %s with %s", name, action.input)

        await handler(action)

        action.finish()
        self.action_finished.emit(action)
        return action

    async def _perform_next(self, action: Action) -> None:  # noqa: ARG002
        await self._session.next()

    async def _perform_prev(self, action: Action) -> None:  # noqa: ARG002
        await self._session.previous()

    async def _perform_group(self, action: Action) -> None:
        # TODO: skip the regroup when the requested zones match the current ones
        await self._session.leave_group()
        topology = await self._topology.fetch_topology()
        for zone_name, wanted in action.input.items():
            if not wanted:
                continue
            coordinator = topology.find_coordinator(zone_name)
            if coordinator is None:
                raise InvalidOperationError(f"Unknown zone {zone_name!r}")
            logger.info("Asking %s (%s) to join %s", zone_name, coordinator.address, self._local_name)
            await self._session.peer(coordinator.address).join_group(self._local_name)
