"""Group topology models."""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ZoneMember:
    """A speaker taking part in a zone group.

    Attributes:
        uid: Unique speaker identifier (e.g. "RINCON_000E58...01400").
        zone_name: Room name shown to users.
        address: Network address (IP) of the speaker.
        visible: False for hidden members such as bonded surrounds.
    """

    uid: str
    zone_name: str = ""
    address: str = ""
    visible: bool = True


@dataclass(frozen=True, slots=True)
class Zone:
    """A group of speakers playing in sync.

    Attributes:
        id: Group identifier, prefixed by the coordinator's uid.
        coordinator_id: uid of the coordinating member.
        members: Members of the group, coordinator included.
    """

    id: str
    coordinator_id: str
    members: tuple[ZoneMember, ...] = field(default_factory=tuple)

    @property
    def coordinator(self) -> ZoneMember | None:
        """Return the coordinating member, if present."""
        for member in self.members:
            if member.uid == self.coordinator_id:
                return member
        return None

    @property
    def zone_name(self) -> str:
        """Return the coordinator's room name."""
        coordinator = self.coordinator
        return coordinator.zone_name if coordinator else ""

    @property
    def member_ids(self) -> list[str]:
        """Return uids of all members."""
        return [m.uid for m in self.members]

    @property
    def visible(self) -> bool:
        """Return True if the coordinator is visible."""
        coordinator = self.coordinator
        return coordinator is not None and coordinator.visible

    def has_member(self, uid_prefix: str) -> bool:
        """Return True if any member's uid starts with uid_prefix."""
        return any(m.uid.startswith(uid_prefix) for m in self.members)


@dataclass(frozen=True, slots=True)
class GroupTopology:
    """Ordered snapshot of all zone groups in the household."""

    zones: tuple[Zone, ...] = field(default_factory=tuple)

    @property
    def coordinators(self) -> list[ZoneMember]:
        """Return the coordinator of each zone, in zone order."""
        result: list[ZoneMember] = []
        for zone in self.zones:
            coordinator = zone.coordinator
            if coordinator is not None:
                result.append(coordinator)
        return result

    def find_coordinator(self, zone_name: str) -> ZoneMember | None:
        """Find a coordinator by room name (case-insensitive).

        Args:
            zone_name: Room name to look up.

        Returns:
            The coordinator if found, else None.
        """
        wanted = zone_name.lower()
        for coordinator in self.coordinators:
            if coordinator.zone_name.lower() == wanted:
                return coordinator
        return None
