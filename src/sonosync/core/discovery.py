"""mDNS discovery of Sonos speakers.

Speakers announce a ``_sonos._tcp`` service named ``<uid>@<room>`` with
the household id in the ``hhid`` TXT entry. A speaker announces itself
once per interface, so results are keyed by uid.
"""

import logging
import threading
import time
from dataclasses import dataclass

from zeroconf import IPVersion, ServiceBrowser, ServiceInfo, ServiceListener, Zeroconf

logger = logging.getLogger(__name__)

SONOS_SERVICE_TYPE = "_sonos._tcp.local."

_TXT_HOUSEHOLD = b"hhid"


@dataclass(frozen=True)
class DiscoveredSpeaker:
    """A speaker found on the network.

    Attributes:
        uid: Speaker uid (e.g. "RINCON_000E58...01400").
        room_name: Room name from the service name.
        host: IPv4 address used to control the speaker.
        household_id: Household the speaker belongs to, if announced.
    """

    uid: str
    room_name: str
    host: str
    household_id: str = ""

    @property
    def display_name(self) -> str:
        """Return the room name, or the host if the room is unknown."""
        return self.room_name or self.host


def parse_service_name(name: str) -> tuple[str, str]:
    """Split a ``<uid>@<room>._sonos._tcp.local.`` service name.

    Returns:
        Tuple of uid and room name. The uid is empty if the name carries
        no ``@``.
    """
    suffix = f".{SONOS_SERVICE_TYPE}"
    if name.endswith(suffix):
        name = name[: -len(suffix)]
    uid, sep, room = name.partition("@")
    if not sep:
        return "", name
    return uid, room


def speaker_from_info(info: ServiceInfo) -> DiscoveredSpeaker | None:
    """Build a DiscoveredSpeaker from resolved service info.

    Returns None if the service has no IPv4 address.
    """
    addresses = info.parsed_addresses(IPVersion.V4Only)
    if not addresses:
        return None
    uid, room = parse_service_name(info.name)
    household = (info.properties or {}).get(_TXT_HOUSEHOLD)
    return DiscoveredSpeaker(
        uid=uid or addresses[0],
        room_name=room,
        host=addresses[0],
        household_id=household.decode("utf-8", "replace") if household else "",
    )


class SonosServiceListener(ServiceListener):
    """Collects Sonos announcements, one entry per speaker uid.

    Zeroconf calls the listener from its own thread.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._speakers: dict[str, DiscoveredSpeaker] = {}
        self._services: dict[str, str] = {}  # service name -> uid

    @property
    def speakers(self) -> list[DiscoveredSpeaker]:
        """Return discovered speakers ordered by room name."""
        with self._lock:
            return sorted(self._speakers.values(), key=lambda s: (s.room_name, s.uid))

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        info = zc.get_service_info(type_, name)
        if info is None:
            logger.debug("No service info for %s", name)
            return
        speaker = speaker_from_info(info)
        if speaker is None:
            logger.debug("No IPv4 address announced for %s", name)
            return

        with self._lock:
            is_new = speaker.uid not in self._speakers
            self._speakers[speaker.uid] = speaker
            self._services[name] = speaker.uid
        if is_new:
            logger.info("Discovered %s at %s", speaker.display_name, speaker.host)

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        self.add_service(zc, type_, name)

    def remove_service(self, zc: Zeroconf, type_: str, name: str) -> None:  # noqa: ARG002
        with self._lock:
            uid = self._services.pop(name, None)
            if uid is None or uid in self._services.values():
                return
            speaker = self._speakers.pop(uid)
        logger.info("Speaker %s went away", speaker.display_name)


def discover_speakers(
    timeout: float = 5.0, household_id: str | None = None
) -> list[DiscoveredSpeaker]:
    """Browse the network for Sonos speakers.

    Args:
        timeout: Seconds to listen for announcements.
        household_id: Only return speakers of this household.

    Returns:
        One entry per speaker, ordered by room name.
    """
    zeroconf = Zeroconf()
    listener = SonosServiceListener()
    browser = ServiceBrowser(zeroconf, SONOS_SERVICE_TYPE, listener)
    try:
        time.sleep(timeout)
    finally:
        browser.cancel()
        zeroconf.close()

    speakers = listener.speakers
    households = {s.household_id for s in speakers if s.household_id}
    if household_id is not None:
        speakers = [s for s in speakers if s.household_id == household_id]
    elif len(households) > 1:
        logger.warning("Found speakers from %d households: %s", len(households), sorted(households))
    return speakers
