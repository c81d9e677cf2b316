"""Live transcription session over a discontinuous recognition engine."""

import asyncio
import logging
from typing import Callable, List, Optional

from ..models.session import SessionState
from ..models.transcription import (
    AlternativeCandidate,
    RecognitionResult,
    TranscriptSnapshot,
    TranscriptUpdate,
)
from ..recognition.base import AbstractRecognitionEngine, EngineFactory, EngineListener
from ..recognition.errors import OTHER, EngineAlreadyActiveError, UnsupportedEnvironmentError
from ..transcription.accumulator import TranscriptAccumulator
from ..transcription.selector import select_best_alternative
from .restart_scheduler import RestartPolicy, RestartScheduler

logger = logging.getLogger(__name__)

TranscriptUpdateCallback = Callable[[TranscriptUpdate], None]
ErrorCallback = Callable[[str], None]
EndCallback = Callable[[str], None]


class LiveTranscriptionSession(EngineListener):
    """Keeps one recording session continuous across engine restarts.

    The engine stops on its own after silence, after an utterance, or on
    transient errors. While the session is recording, every such stop is
    followed by a scheduled restart, so the caller sees one uninterrupted
    transcript. All engine events and restart timers run on one event loop.
    """

    def __init__(self,
                 engine_factory: Optional[EngineFactory],
                 language: str = "en-US",
                 restart_policy: Optional[RestartPolicy] = None,
                 max_alternatives: int = 3,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        """Initialize session.

        Args:
            engine_factory: Builds the engine on first start; None when the
                host has no recognition capability
            language: Language tag applied on the next engine start
            restart_policy: Restart delays per end/error kind
            max_alternatives: Alternatives considered per final result
            loop: Event loop for restart timers (defaults to the running loop)
        """
        self._engine_factory = engine_factory
        self._engine: Optional[AbstractRecognitionEngine] = None
        self._language = language
        self._max_alternatives = max_alternatives
        self.restart_policy = restart_policy or RestartPolicy()

        self._state = SessionState.IDLE
        self._accumulator = TranscriptAccumulator()
        self._scheduler = RestartScheduler(
            restart=self._restart_engine,
            is_active=lambda: self._state is SessionState.RECORDING,
            loop=loop,
        )
        self._end_delivered = False
        self._stopped_transcript = ""
        # False once the engine reported end for its last start command
        self._engine_listening = False

        self._on_transcript_update: Optional[TranscriptUpdateCallback] = None
        self._on_error: Optional[ErrorCallback] = None
        self._on_end: Optional[EndCallback] = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def language(self) -> str:
        return self._language

    @property
    def scheduler(self) -> RestartScheduler:
        return self._scheduler

    def is_supported(self) -> bool:
        """Whether the host offers a recognition capability at all."""
        return self._engine_factory is not None

    def get_transcript(self) -> TranscriptSnapshot:
        return self._accumulator.snapshot()

    # ------------------------------------------------------------------
    # Callback registration
    # ------------------------------------------------------------------

    def set_on_transcript_update(self, callback: Optional[TranscriptUpdateCallback]) -> None:
        self._on_transcript_update = callback

    def set_on_error(self, callback: Optional[ErrorCallback]) -> None:
        self._on_error = callback

    def set_on_end(self, callback: Optional[EndCallback]) -> None:
        """Register the receiver of the final transcript.

        Called once per recording: on the engine end that follows stop(), or
        from stop() itself when the engine had already ended (stop after pause).
        """
        self._on_end = callback

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start recording from IDLE or STOPPED.

        Raises:
            UnsupportedEnvironmentError: If no recognition capability exists
        """
        if self._state not in (SessionState.IDLE, SessionState.STOPPED):
            logger.debug(f"start() ignored in state {self._state.value}")
            return

        if self._engine is None:
            if not self.is_supported():
                raise UnsupportedEnvironmentError(
                    "Speech recognition is not supported in this environment")
            self._engine = self._engine_factory()
            self._engine.max_alternatives = self._max_alternatives
            self._engine.set_listener(self)

        previous_state = self._state
        self._accumulator.clear()
        self._end_delivered = False
        self._state = SessionState.RECORDING
        try:
            self._start_engine()
        except Exception:
            self._state = previous_state
            raise
        logger.info(f"Recording started (language: {self._language})")

    def pause(self) -> None:
        if self._state is not SessionState.RECORDING:
            return
        self._scheduler.cancel()
        self._state = SessionState.PAUSED
        self._engine.stop()
        logger.info("Recording paused")

    def resume(self) -> None:
        if self._state is not SessionState.PAUSED:
            return
        self._state = SessionState.RECORDING
        try:
            self._start_engine()
        except Exception:
            self._state = SessionState.PAUSED
            raise
        logger.info("Recording resumed")

    def stop(self) -> str:
        """Stop recording and return the final transcript at this instant."""
        if self._state not in (SessionState.RECORDING, SessionState.PAUSED):
            return ""
        self._scheduler.cancel()
        self._state = SessionState.STOPPED
        transcript = self._accumulator.final_text
        self._stopped_transcript = transcript
        self._engine.stop()
        logger.info(f"Recording stopped ({len(self._accumulator.segments)} segments)")
        if not self._engine_listening:
            # No end event will follow, the engine already ended while paused
            self._deliver_end()
        return transcript

    def set_language(self, tag: str) -> None:
        """Set the language tag; it takes effect on the next engine start."""
        self._language = tag
        if self._engine is not None:
            self._engine.language = tag
        logger.info(f"Language set to: {tag}")

    def clear(self) -> None:
        self._accumulator.clear()

    def _start_engine(self) -> None:
        self._engine.language = self._language
        try:
            self._engine.start()
        except EngineAlreadyActiveError:
            logger.debug("Engine already active, treating start as successful")
        self._engine_listening = True

    def _restart_engine(self) -> None:
        """Scheduled restart; failures are reported as errors, never raised."""
        try:
            self._start_engine()
        except Exception as e:
            logger.error(f"Engine restart failed: {e}", exc_info=True)
            self.on_error(OTHER)

    # ------------------------------------------------------------------
    # Engine events
    # ------------------------------------------------------------------

    def on_start(self) -> None:
        logger.debug("Recognition engine started listening")

    def on_result(self, results: List[RecognitionResult]) -> None:
        if self._state is SessionState.STOPPED:
            logger.debug(f"Dropping {len(results)} results received after stop")
            return

        considered: List[AlternativeCandidate] = []
        new_segments = []
        interim_parts = []

        for result in results:
            alternatives = list(result.alternatives[:self._max_alternatives])
            if len(alternatives) > 1:
                considered.extend(alternatives)

            if result.is_final:
                best = select_best_alternative(
                    alternatives,
                    fallback=AlternativeCandidate(text=result.text, confidence=result.confidence),
                )
                new_segments.append(self._accumulator.append_final(best.text, best.confidence))
                logger.info(f"Final: '{best.text}' (confidence: {best.confidence:.1%})")
            else:
                interim_parts.append(result.text)

        # Non-final results of one batch together form the current hypothesis
        self._accumulator.set_interim("".join(interim_parts))
        snapshot = self._accumulator.snapshot()
        update = TranscriptUpdate(
            final=snapshot.final,
            interim=snapshot.interim,
            combined=snapshot.combined,
            alternatives=considered,
            new_segments=new_segments,
        )
        self._notify(self._on_transcript_update, update)

    def on_error(self, kind: str) -> None:
        logger.warning(f"Speech recognition error: {kind}")
        self._notify(self._on_error, kind)

        if self._state is not SessionState.RECORDING:
            return
        delay = self.restart_policy.delay_for_error(kind)
        if delay is None:
            logger.error(f"Fatal recognition error '{kind}', not restarting")
            return
        self._scheduler.schedule(delay)

    def on_end(self) -> None:
        logger.debug(f"Recognition engine ended (session {self._state.value})")
        self._engine_listening = False
        if self._state is SessionState.RECORDING:
            logger.info("Auto-restarting recognition")
            self._scheduler.schedule(self.restart_policy.default_delay)
        elif self._state is SessionState.STOPPED:
            self._deliver_end()

    def _deliver_end(self) -> None:
        if self._end_delivered:
            return
        self._end_delivered = True
        self._notify(self._on_end, self._stopped_transcript)

    def _notify(self, callback: Optional[Callable], payload) -> None:
        """Invoke a caller callback; its failures never reach the engine."""
        if callback is None:
            return
        try:
            callback(payload)
        except Exception as e:
            logger.error(f"Error in session callback {getattr(callback, '__name__', callback)}: {e}",
                         exc_info=True)
