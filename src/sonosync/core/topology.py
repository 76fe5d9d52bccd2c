"""Builds the group action's input schema from the live topology."""

import logging

from sonosync.api.session import DeviceSession
from sonosync.models.action import ActionSchema, BooleanField
from sonosync.models.topology import GroupTopology

logger = logging.getLogger(__name__)

GROUP_ACTION = "group"
GROUP_LABEL = "Group/Ungroup"
GROUP_DESCRIPTION = "Group Sonos players"


def build_group_schema(topology: GroupTopology, local_id: str) -> ActionSchema:
    """Build the group action schema for a topology snapshot.

    Zones coordinated by the local speaker are skipped, as are zones whose
    coordinator is hidden. Each remaining coordinator contributes one
    boolean field named after its room, defaulting to True when the local
    speaker already belongs to that zone. Fields follow zone order.

    Args:
        topology: Snapshot of all zone groups.
        local_id: uid prefix of the local speaker.

    Returns:
        Schema of the group action.
    """
    fields: list[BooleanField] = []
    seen: set[str] = set()
    for zone in topology.zones:
        if zone.id.startswith(local_id):
            continue
        coordinator = zone.coordinator
        if coordinator is None or not coordinator.visible:
            continue
        if coordinator.zone_name in seen:
            logger.debug("Skipping duplicate room name %s", coordinator.zone_name)
            continue
        seen.add(coordinator.zone_name)
        fields.append(BooleanField(coordinator.zone_name, default=zone.has_member(local_id)))

    return ActionSchema(
        name=GROUP_ACTION,
        label=GROUP_LABEL,
        description=GROUP_DESCRIPTION,
        fields=tuple(fields),
    )


class GroupTopologyBuilder:
    """Queries a speaker for the topology and builds the group schema."""

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    async def fetch_topology(self) -> GroupTopology:
        """Return the current topology snapshot."""
        return await self._session.get_all_groups()

    async def build_group_action(self, local_id: str) -> ActionSchema:
        """Query the topology and build the group action schema.

        Args:
            local_id: uid prefix of the local speaker.

        Raises:
            RemoteCallError: If the topology query fails.
        """
        topology = await self.fetch_topology()
        schema = build_group_schema(topology, local_id)
        logger.debug("Group action offers %s", schema.field_names)
        return schema
