"""QThread worker hosting the asyncio loop that drives the speakers.

SoCo's event listener is shared per process, so every speaker runs on the
same loop in one background thread. Results are bridged to the main
thread via Qt signals.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QThread, Signal

from sonosync.api.session import DeviceSession, RetryPolicy
from sonosync.api.soco_session import SocoSession, shutdown_event_listener
from sonosync.core.interpolator import DEFAULT_TICK_INTERVAL
from sonosync.core.speaker import Speaker
from sonosync.errors import SonosyncError

logger = logging.getLogger(__name__)

SessionFactory = Callable[[str, RetryPolicy], DeviceSession]

_MAX_RECONNECT_DELAY = 30.0
_CONNECTION_CHECK_INTERVAL = 0.5


class SpeakerWorker(QThread):
    """Background thread keeping one or more speakers in sync.

    Each speaker is initialized, kept alive while its event subscription
    holds, and re-initialized with exponential backoff when it is lost.

    Example:
        worker = SpeakerWorker(["192.168.1.50", "192.168.1.51"])
        worker.property_changed.connect(lambda host, key, value: print(host, key, value))
        worker.start()
        worker.write_property("192.168.1.50", "volume", 20)
    """

    speaker_ready = Signal(str, object)  # host, Speaker
    connection_lost = Signal(str)  # host
    property_changed = Signal(str, str, object)  # host, key, value
    action_finished = Signal(str, object)  # host, Action
    error_occurred = Signal(str, object)  # host, Exception

    def __init__(
        self,
        hosts: list[str],
        retry_policy: RetryPolicy | None = None,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        session_factory: SessionFactory | None = None,
    ) -> None:
        """Initialize the worker.

        Args:
            hosts: Speaker addresses to drive.
            retry_policy: Retry/timeout policy for remote calls.
            tick_interval: Seconds between progress interpolation ticks.
            session_factory: Builds a session for a host (default SocoSession).
        """
        super().__init__()
        self._hosts = list(hosts)
        self._retry_policy = retry_policy or RetryPolicy()
        self._tick_interval = tick_interval
        self._session_factory: SessionFactory = session_factory or SocoSession
        self._speakers: dict[str, Speaker] = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        self._should_run = True
        self._reconnect_delay = 2.0  # Initial reconnect delay

    @property
    def hosts(self) -> list[str]:
        """Return the speaker addresses."""
        return list(self._hosts)

    def speaker(self, host: str) -> Speaker | None:
        """Return the live speaker for host, if initialized."""
        return self._speakers.get(host)

    def stop(self) -> None:
        """Signal the worker to stop (called from main thread)."""
        self._should_run = False

    def write_property(self, host: str, key: str, value: Any) -> None:
        """Write a speaker property.

        Thread-safe call from main thread. Errors are emitted via error_occurred.

        Args:
            host: Speaker address.
            key: Property key.
            value: New value.
        """
        if self._loop and self._loop.is_running():
            asyncio.run_coroutine_threadsafe(self._safe_write_property(host, key, value), self._loop)

    async def _safe_write_property(self, host: str, key: str, value: Any) -> None:
        speaker = self._speakers.get(host)
        if speaker is None:
            logger.debug("Ignoring write to %s on unavailable speaker %s", key, host)
            return
        try:
            await speaker.write_property(key, value)
        except SonosyncError as e:
            self.error_occurred.emit(host, e)
        except Exception as e:
            logger.exception("Writing %s on %s failed", key, host)
            self.error_occurred.emit(host, e)

    def perform_action(self, host: str, name: str, action_input: dict[str, Any] | None = None) -> None:
        """Run a speaker action.

        Thread-safe call from main thread. Errors are emitted via error_occurred.

        Args:
            host: Speaker address.
            name: Action name.
            action_input: Input values for actions with a schema.
        """
        if self._loop and self._loop.is_running():
            asyncio.run_coroutine_threadsafe(
                self._safe_perform_action(host, name, action_input), self._loop
            )

    async def _safe_perform_action(
        self, host: str, name: str, action_input: dict[str, Any] | None
    ) -> None:
        speaker = self._speakers.get(host)
        if speaker is None:
            logger.debug("Ignoring action %s on unavailable speaker %s", name, host)
            return
        try:
            action = await speaker.perform_action(name, action_input)
            self.action_finished.emit(host, action)
        except SonosyncError as e:
            self.error_occurred.emit(host, e)
        except Exception as e:
            logger.exception("Action %s on %s failed", name, host)
            self.error_occurred.emit(host, e)

    def run(self) -> None:
        """Run the worker thread (entry point)."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        try:
            self._loop.run_until_complete(self._run_all())
        except Exception as e:
            logger.exception("Speaker worker crashed")
            self.error_occurred.emit("", e)
        finally:
            self._loop.run_until_complete(shutdown_event_listener())
            self._loop.close()
            self._loop = None

    async def _run_all(self) -> None:
        results = await asyncio.gather(
            *(self._speaker_loop(host) for host in self._hosts), return_exceptions=True
        )
        for host, result in zip(self._hosts, results, strict=True):
            if isinstance(result, Exception):
                logger.error("Speaker loop for %s stopped: %s", host, result)
                self.error_occurred.emit(host, result)

    async def _speaker_loop(self, host: str) -> None:
        """Keep one speaker initialized, reconnecting with backoff."""
        reconnect_delay = self._reconnect_delay

        while self._should_run:
            speaker = Speaker(self._session_factory(host, self._retry_policy), self._tick_interval)
            speaker.registry.property_changed.connect(
                lambda key, value, host=host: self.property_changed.emit(host, key, value)
            )
            speaker.error_occurred.connect(lambda e, host=host: self.error_occurred.emit(host, e))

            try:
                await speaker.initialize()
                self._speakers[host] = speaker
                self.speaker_ready.emit(host, speaker)
                reconnect_delay = self._reconnect_delay  # Reset delay

                while self._should_run and speaker.is_connected:
                    await asyncio.sleep(_CONNECTION_CHECK_INTERVAL)
            except SonosyncError as e:
                logger.warning("Speaker %s unavailable: %s", host, e)
                self.error_occurred.emit(host, e)
            except Exception as e:
                logger.exception("Unexpected error driving speaker %s", host)
                self.error_occurred.emit(host, e)
            finally:
                self._speakers.pop(host, None)
                await speaker.close()

            if not self._should_run:
                break

            self.connection_lost.emit(host)
            await asyncio.sleep(reconnect_delay)
            reconnect_delay = min(reconnect_delay * 2, _MAX_RECONNECT_DELAY)
