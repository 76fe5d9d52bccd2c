"""Tests for the action dispatcher."""

import pytest
from conftest import FakeSession, make_topology
from pytestqt.qtbot import QtBot

from sonosync.core.actions import NEXT_ACTION, PREV_ACTION, ActionDispatcher
from sonosync.core.topology import GroupTopologyBuilder, build_group_schema
from sonosync.errors import InvalidOperationError, RemoteCallError
from sonosync.models.action import Action, ActionStatus


@pytest.fixture
def dispatcher(session: FakeSession) -> ActionDispatcher:
    """Return a dispatcher for the Living Room speaker."""
    session.topology = make_topology()
    return ActionDispatcher(session, GroupTopologyBuilder(session), local_name="Living Room")


class TestActionDispatcher:
    """Tests for ActionDispatcher."""

    def test_default_schemas(self, dispatcher: ActionDispatcher) -> None:
        """Test next and prev are always available."""
        assert dispatcher.schemas == [NEXT_ACTION, PREV_ACTION]
        assert dispatcher.schema("group") is None
        assert NEXT_ACTION.label == "Next"
        assert PREV_ACTION.label == "Previous"

    def test_set_group_schema(self, dispatcher: ActionDispatcher) -> None:
        """Test the group schema can be installed."""
        schema = build_group_schema(make_topology(), "RINCON_A01400")
        dispatcher.set_group_schema(schema)
        assert dispatcher.schema("group") is schema

    @pytest.mark.asyncio
    async def test_next(self, session: FakeSession, dispatcher: ActionDispatcher) -> None:
        """Test next skips a track and completes."""
        action = await dispatcher.perform_action("next")
        assert session.commands == ["next"]
        assert action.status is ActionStatus.COMPLETED
        assert action.time_completed is not None

    @pytest.mark.asyncio
    async def test_prev(self, session: FakeSession, dispatcher: ActionDispatcher) -> None:
        """Test prev goes back a track."""
        await dispatcher.perform_action("prev")
        assert session.commands == ["previous"]

    @pytest.mark.asyncio
    async def test_lifecycle_signals(self, dispatcher: ActionDispatcher) -> None:
        """Test started and finished are emitted in order."""
        events: list[tuple[str, ActionStatus]] = []
        dispatcher.action_started.connect(lambda a: events.append(("started", a.status)))
        dispatcher.action_finished.connect(lambda a: events.append(("finished", a.status)))
        await dispatcher.perform_action("next")
        assert events == [
            ("started", ActionStatus.PENDING),
            ("finished", ActionStatus.COMPLETED),
        ]

    @pytest.mark.asyncio
    async def test_failure_stays_pending(
        self, qtbot: QtBot, session: FakeSession, dispatcher: ActionDispatcher
    ) -> None:
        """Test a failing action never finishes."""
        session.failures["next"] = RemoteCallError("next", 3, "unreachable")
        started: list[Action] = []
        dispatcher.action_started.connect(started.append)
        with qtbot.assertNotEmitted(dispatcher.action_finished):
            with pytest.raises(RemoteCallError):
                await dispatcher.perform_action("next")
        assert started[0].status is ActionStatus.PENDING

    @pytest.mark.asyncio
    async def test_unknown_action(self, dispatcher: ActionDispatcher) -> None:
        """Test unknown actions are rejected."""
        with pytest.raises(InvalidOperationError):
            await dispatcher.perform_action("shutdown")

    @pytest.mark.asyncio
    async def test_group_requires_schema(self, dispatcher: ActionDispatcher) -> None:
        """Test group is unavailable until its schema is installed."""
        with pytest.raises(InvalidOperationError):
            await dispatcher.perform_action("group", {"Bedroom": True})

    @pytest.mark.asyncio
    async def test_group(self, session: FakeSession, dispatcher: ActionDispatcher) -> None:
        """Test grouping leaves, then asks each checked zone to join."""
        dispatcher.set_group_schema(build_group_schema(make_topology(), "RINCON_A01400"))
        action = await dispatcher.perform_action("group", {"Bedroom": True})

        assert session.commands == ["leave_group", "get_all_groups"]
        bedroom = session.peers["192.168.1.12"]
        assert bedroom.calls == [("join_group", ("Living Room",))]
        assert action.status is ActionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_group_unchecked_only_leaves(
        self, session: FakeSession, dispatcher: ActionDispatcher
    ) -> None:
        """Test unchecking every zone just leaves the group."""
        dispatcher.set_group_schema(build_group_schema(make_topology(), "RINCON_A01400"))
        await dispatcher.perform_action("group", {"Bedroom": False})
        assert session.commands == ["leave_group", "get_all_groups"]
        assert session.peers == {}

    @pytest.mark.asyncio
    async def test_group_unknown_zone(
        self, session: FakeSession, dispatcher: ActionDispatcher
    ) -> None:
        """Test an unknown room fails the action."""
        dispatcher.set_group_schema(build_group_schema(make_topology(), "RINCON_A01400"))
        with pytest.raises(InvalidOperationError, match="Garage"):
            await dispatcher.perform_action("group", {"Garage": True})
