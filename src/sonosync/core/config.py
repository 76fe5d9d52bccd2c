"""Configuration manager using QSettings for persistent storage."""

import logging
from typing import cast

from PySide6.QtCore import QSettings

from sonosync.api.session import RetryPolicy
from sonosync.core.interpolator import DEFAULT_TICK_INTERVAL

logger = logging.getLogger(__name__)

# Settings keys
_KEY_SPEAKERS = "speakers"

# Remote calls
_KEY_REMOTE_TIMEOUT = "remote/timeout"
_KEY_REMOTE_ATTEMPTS = "remote/attempts"
_KEY_REMOTE_RETRY_DELAY = "remote/retry_delay"

# Progress interpolation
_KEY_PROGRESS_INTERVAL = "progress/interval"

# Discovery
_KEY_DISCOVERY_TIMEOUT = "discovery/timeout"

DEFAULT_REMOTE_TIMEOUT = 10.0
DEFAULT_REMOTE_ATTEMPTS = 3
DEFAULT_REMOTE_RETRY_DELAY = 0.5
DEFAULT_DISCOVERY_TIMEOUT = 5.0


class ConfigManager:
    """Wrapper around QSettings for type-safe config access.

    QSettings stores config in platform-specific locations:
    - Windows: HKEY_CURRENT_USER\\Software\\Sonosync\\Sonosync
    - macOS: ~/Library/Preferences/com.Sonosync.Sonosync.plist
    - Linux: ~/.config/Sonosync/Sonosync.conf

    Example:
        config = ConfigManager()
        config.add_speaker("192.168.1.50")
        policy = config.get_retry_policy()
    """

    def __init__(self, organization: str = "Sonosync", application: str = "Sonosync") -> None:
        """Initialize the config manager.

        Args:
            organization: Organization name for QSettings.
            application: Application name for QSettings.
        """
        self._settings = QSettings(organization, application)

    @property
    def settings(self) -> QSettings:
        """Return the underlying QSettings instance."""
        return self._settings

    def _get_float(self, key: str, default: float, minimum: float, maximum: float) -> float:
        raw = self._settings.value(key, default)
        try:
            value = float(cast(float, raw))
        except (TypeError, ValueError):
            logger.warning("Invalid value %r for %s, using %s", raw, key, default)
            return default
        return max(minimum, min(maximum, value))

    def _get_int(self, key: str, default: int, minimum: int, maximum: int) -> int:
        raw = self._settings.value(key, default)
        try:
            value = int(cast(int, raw))
        except (TypeError, ValueError):
            logger.warning("Invalid value %r for %s, using %s", raw, key, default)
            return default
        return max(minimum, min(maximum, value))

    # -- Speakers --------------------------------------------------------------

    def get_speakers(self) -> list[str]:
        """Load saved speaker hosts.

        Returns:
            List of hosts, or empty list if none saved.
        """
        raw_data = self._settings.value(_KEY_SPEAKERS, [])
        if isinstance(raw_data, str):
            # QSettings collapses single-element lists on some backends
            raw_data = [raw_data]
        if not isinstance(raw_data, list):
            return []
        data = cast(list[object], raw_data)
        return [str(item) for item in data if item]

    def save_speakers(self, hosts: list[str]) -> None:
        """Persist speaker hosts.

        Args:
            hosts: Hosts to save, in order.
        """
        self._settings.setValue(_KEY_SPEAKERS, list(hosts))

    def add_speaker(self, host: str) -> None:
        """Add a speaker host (no-op if already saved).

        Args:
            host: Host to add.
        """
        hosts = self.get_speakers()
        if host not in hosts:
            hosts.append(host)
            self.save_speakers(hosts)

    def remove_speaker(self, host: str) -> bool:
        """Remove a speaker host.

        Args:
            host: Host to remove.

        Returns:
            True if the host was removed, False if not found.
        """
        hosts = self.get_speakers()
        if host not in hosts:
            return False
        hosts.remove(host)
        self.save_speakers(hosts)
        return True

    # -- Remote call settings --------------------------------------------------

    def get_remote_timeout(self) -> float:
        """Return the per-attempt timeout for remote calls in seconds (default 10)."""
        return self._get_float(_KEY_REMOTE_TIMEOUT, DEFAULT_REMOTE_TIMEOUT, 1.0, 120.0)

    def set_remote_timeout(self, seconds: float) -> None:
        """Set the per-attempt timeout (1-120 seconds)."""
        self._settings.setValue(_KEY_REMOTE_TIMEOUT, max(1.0, min(120.0, seconds)))

    def get_remote_attempts(self) -> int:
        """Return the number of attempts per remote call (default 3)."""
        return self._get_int(_KEY_REMOTE_ATTEMPTS, DEFAULT_REMOTE_ATTEMPTS, 1, 10)

    def set_remote_attempts(self, attempts: int) -> None:
        """Set the number of attempts per remote call (1-10)."""
        self._settings.setValue(_KEY_REMOTE_ATTEMPTS, max(1, min(10, attempts)))

    def get_remote_retry_delay(self) -> float:
        """Return the initial delay between attempts in seconds (default 0.5)."""
        return self._get_float(_KEY_REMOTE_RETRY_DELAY, DEFAULT_REMOTE_RETRY_DELAY, 0.0, 10.0)

    def set_remote_retry_delay(self, seconds: float) -> None:
        """Set the initial delay between attempts (0-10 seconds)."""
        self._settings.setValue(_KEY_REMOTE_RETRY_DELAY, max(0.0, min(10.0, seconds)))

    def get_retry_policy(self) -> RetryPolicy:
        """Build the retry policy from the remote call settings."""
        return RetryPolicy(
            attempts=self.get_remote_attempts(),
            timeout=self.get_remote_timeout(),
            delay=self.get_remote_retry_delay(),
        )

    # -- Progress and discovery ------------------------------------------------

    def get_progress_interval(self) -> float:
        """Return the progress interpolation tick in seconds (default 1)."""
        return self._get_float(_KEY_PROGRESS_INTERVAL, DEFAULT_TICK_INTERVAL, 0.1, 10.0)

    def set_progress_interval(self, seconds: float) -> None:
        """Set the progress interpolation tick (0.1-10 seconds)."""
        self._settings.setValue(_KEY_PROGRESS_INTERVAL, max(0.1, min(10.0, seconds)))

    def get_discovery_timeout(self) -> float:
        """Return how long discovery waits for speakers in seconds (default 5)."""
        return self._get_float(_KEY_DISCOVERY_TIMEOUT, DEFAULT_DISCOVERY_TIMEOUT, 0.5, 60.0)

    def set_discovery_timeout(self, seconds: float) -> None:
        """Set the discovery timeout (0.5-60 seconds)."""
        self._settings.setValue(_KEY_DISCOVERY_TIMEOUT, max(0.5, min(60.0, seconds)))

    # -- General settings ------------------------------------------------------

    def clear(self) -> None:
        """Clear all settings (useful for testing or reset)."""
        self._settings.clear()

    def sync(self) -> None:
        """Force settings to be written to disk."""
        self._settings.sync()
