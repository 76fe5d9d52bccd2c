"""Headless runner: keeps speakers in sync and logs their property changes."""

import argparse
import logging
import signal
import sys
from typing import Any

from PySide6.QtCore import QCoreApplication, QTimer

from sonosync.core.config import ConfigManager
from sonosync.core.discovery import discover_speakers
from sonosync.core.speaker import Speaker
from sonosync.core.worker import SpeakerWorker

logger = logging.getLogger("sonosync")


def discover_hosts(timeout: float, household_id: str | None = None) -> list[str]:
    """Discover Sonos speakers on the network.

    Args:
        timeout: Seconds to wait for announcements.
        household_id: Only use speakers of this household.

    Returns:
        Addresses of the discovered speakers.
    """
    logger.info("Searching for Sonos speakers via mDNS...")
    speakers = discover_speakers(timeout=timeout, household_id=household_id)
    for speaker in speakers:
        logger.info("Found speaker: %s at %s", speaker.display_name, speaker.host)
    if not speakers:
        logger.warning("No Sonos speakers found via mDNS")
    return [s.host for s in speakers]


def main() -> int:
    """Run the sync engine until interrupted.

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(
        prog="sonosync",
        description="Keep Sonos speaker state in sync and log changes",
    )
    parser.add_argument("hosts", nargs="*", help="speaker IP addresses (default: saved or mDNS)")
    parser.add_argument("--save", action="store_true", help="remember the given hosts")
    parser.add_argument("--household", help="only discover speakers of this household id")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parsed = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    QCoreApplication.setApplicationName("Sonosync")
    QCoreApplication.setOrganizationName("Sonosync")
    app = QCoreApplication(sys.argv)

    config = ConfigManager()
    hosts: list[str] = parsed.hosts or config.get_speakers()
    if parsed.save:
        for host in parsed.hosts:
            config.add_speaker(host)
    if not hosts:
        hosts = discover_hosts(config.get_discovery_timeout(), parsed.household)
    if not hosts:
        logger.error("No speakers to sync; pass addresses on the command line")
        return 1

    worker = SpeakerWorker(
        hosts,
        retry_policy=config.get_retry_policy(),
        tick_interval=config.get_progress_interval(),
    )

    def on_ready(host: str, speaker: Speaker) -> None:
        actions = ", ".join(s.name for s in speaker.actions.schemas)
        logger.info("%s (%s) ready; actions: %s", speaker.name, host, actions)

    def on_property_changed(host: str, key: str, value: Any) -> None:
        logger.info("%s %s = %r", host, key, value)

    def on_error(host: str, error: Exception) -> None:
        logger.error("%s: %s", host or "worker", error)

    worker.speaker_ready.connect(on_ready)
    worker.property_changed.connect(on_property_changed)
    worker.error_occurred.connect(on_error)
    worker.connection_lost.connect(lambda host: logger.warning("%s: reconnecting", host))
    worker.finished.connect(app.quit)

    signal.signal(signal.SIGINT, lambda *_: worker.stop())
    # Let the interpreter run so the SIGINT handler fires during app.exec()
    wakeup = QTimer()
    wakeup.timeout.connect(lambda: None)
    wakeup.start(500)

    worker.start()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
