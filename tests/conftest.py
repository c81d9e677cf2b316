"""Pytest configuration and fixtures for LiveScribe tests."""

import asyncio
import logging
from typing import List, Optional

import pytest

from livescribe.models.transcription import AlternativeCandidate, RecognitionResult
from livescribe.recognition.base import AbstractRecognitionEngine, EngineListener
from livescribe.recognition.errors import EngineAlreadyActiveError
from livescribe.services.live_session import LiveTranscriptionSession
from livescribe.services.restart_scheduler import RestartPolicy


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without external services")


class ScriptedEngine(AbstractRecognitionEngine):
    """In-memory engine: records commands, emits events on demand."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.commands: List[str] = []
        self.start_languages: List[str] = []
        self.listening = False
        # Raised by the next start() only
        self.start_failure: Optional[Exception] = None

    def start(self) -> None:
        self.commands.append("start")
        self.start_languages.append(self.language)
        if self.start_failure is not None:
            failure, self.start_failure = self.start_failure, None
            raise failure
        if self.listening:
            raise EngineAlreadyActiveError("already listening")
        self.listening = True

    def stop(self) -> None:
        self.commands.append("stop")
        self.listening = False

    @property
    def start_count(self) -> int:
        return self.commands.count("start")

    def emit_start(self) -> None:
        self.listener.on_start()

    def emit_results(self, *results: RecognitionResult) -> None:
        self.listener.on_result(list(results))

    def emit_error(self, kind: str) -> None:
        self.listener.on_error(kind)

    def emit_end(self) -> None:
        self.listening = False
        self.listener.on_end()


class RecordingListener(EngineListener):
    """Collects engine events as (name, payload) tuples."""

    def __init__(self):
        self.events = []

    def on_start(self) -> None:
        self.events.append(("start", None))

    def on_result(self, results) -> None:
        self.events.append(("result", results))

    def on_error(self, kind: str) -> None:
        self.events.append(("error", kind))

    def on_end(self) -> None:
        self.events.append(("end", None))

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.events]


def final(text: str, confidence: float = 0.9, alternatives=()) -> RecognitionResult:
    return RecognitionResult(
        text=text,
        confidence=confidence,
        is_final=True,
        alternatives=[AlternativeCandidate(t, c) for t, c in alternatives],
    )


def interim(text: str) -> RecognitionResult:
    return RecognitionResult(text=text, is_final=False)


@pytest.fixture
def loop():
    """Fresh event loop, not running; advance it with run_for()."""
    event_loop = asyncio.new_event_loop()
    yield event_loop
    event_loop.close()


@pytest.fixture
def run_for(loop):
    """Run the loop for the given number of seconds."""
    def advance(seconds: float) -> None:
        loop.run_until_complete(asyncio.sleep(seconds))
    return advance


@pytest.fixture
def loop_errors(loop):
    """Exceptions that reached the event loop's exception handler."""
    collected = []
    loop.set_exception_handler(lambda _loop, context: collected.append(context.get("exception")))
    return collected


@pytest.fixture
def fast_policy():
    return RestartPolicy(
        default_delay=0.01,
        no_speech_delay=0.02,
        network_delay=0.05,
        other_delay=0.02,
    )


@pytest.fixture
def engine():
    return ScriptedEngine()


@pytest.fixture
def session(engine, fast_policy, loop):
    return LiveTranscriptionSession(
        engine_factory=lambda: engine,
        restart_policy=fast_policy,
        loop=loop,
    )


@pytest.fixture
def updates(session):
    collected = []
    session.set_on_transcript_update(collected.append)
    return collected


@pytest.fixture
def errors(session):
    collected = []
    session.set_on_error(collected.append)
    return collected


@pytest.fixture
def ends(session):
    collected = []
    session.set_on_end(collected.append)
    return collected
