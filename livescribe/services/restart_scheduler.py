"""Restart scheduling for engines that stop on their own."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..config import LiveScribeConfig
from ..recognition.errors import NETWORK, NO_SPEECH, ErrorSeverity, classify_error

logger = logging.getLogger(__name__)


@dataclass
class RestartPolicy:
    """Delays (seconds) before re-invoking the engine after an end or error."""
    default_delay: float = 0.5
    no_speech_delay: float = 1.0
    network_delay: float = 2.0
    other_delay: float = 1.0

    @classmethod
    def from_config(cls, config: LiveScribeConfig) -> "RestartPolicy":
        return cls(
            default_delay=float(config.get('restart.default_delay_seconds', cls.default_delay)),
            no_speech_delay=float(config.get('restart.no_speech_delay_seconds', cls.no_speech_delay)),
            network_delay=float(config.get('restart.network_delay_seconds', cls.network_delay)),
            other_delay=float(config.get('restart.other_delay_seconds', cls.other_delay)),
        )

    def delay_for_error(self, kind: str) -> Optional[float]:
        """Return the restart delay for an error kind, or None if it is fatal."""
        if classify_error(kind) is ErrorSeverity.FATAL:
            return None
        if kind == NO_SPEECH:
            return self.no_speech_delay
        if kind == NETWORK:
            return self.network_delay
        return self.other_delay


class RestartScheduler:
    """Owns the single pending restart of a session's engine.

    A new schedule always cancels the previous one, so a burst of end and
    error events for the same cause produces one restart.
    """

    def __init__(self,
                 restart: Callable[[], None],
                 is_active: Callable[[], bool],
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        """Initialize restart scheduler.

        Args:
            restart: Issues the engine start command
            is_active: Checked at fire time; the restart is dropped when False
            loop: Event loop the timer runs on (defaults to the running loop)
        """
        self._restart = restart
        self._is_active = is_active
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    def schedule(self, delay: float) -> None:
        """Cancel any pending restart and arm a new one after delay seconds."""
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(delay, self._fire)
        logger.debug(f"Restart scheduled in {delay:.2f}s")

    def cancel(self) -> None:
        """Invalidate the pending restart, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            logger.debug("Pending restart cancelled")

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def due_time(self) -> Optional[float]:
        """Loop time at which the pending restart fires."""
        if self._handle is None:
            return None
        return self._handle.when()

    def _fire(self) -> None:
        self._handle = None
        if not self._is_active():
            logger.debug("Restart timer fired after session left recording, ignoring")
            return
        logger.info("Restarting recognition engine")
        self._restart()
