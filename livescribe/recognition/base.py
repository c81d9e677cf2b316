"""Abstract base classes for recognition engines."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional
import logging

from ..models.transcription import RecognitionResult

logger = logging.getLogger(__name__)


class EngineListener(ABC):
    """Receiver of the four engine events.

    Engines deliver events one at a time, in emission order, on the event
    loop that owns the listener.
    """

    @abstractmethod
    def on_start(self) -> None:
        pass

    @abstractmethod
    def on_result(self, results: List[RecognitionResult]) -> None:
        pass

    @abstractmethod
    def on_error(self, kind: str) -> None:
        pass

    @abstractmethod
    def on_end(self) -> None:
        pass


class AbstractRecognitionEngine(ABC):
    """Abstract base class for continuous speech recognition engines."""

    def __init__(self,
                 language: str = "en-US",
                 interim_results: bool = True,
                 max_alternatives: int = 3):
        """Initialize engine with language and emission preferences.

        Args:
            language: BCP-47 language tag used on the next start
            interim_results: Whether non-final results are emitted
            max_alternatives: Maximum number of alternatives per result
        """
        self.language = language
        self.interim_results = interim_results
        self.max_alternatives = max_alternatives
        self.listener: Optional[EngineListener] = None

    def set_listener(self, listener: EngineListener) -> None:
        """Register the receiver of engine events."""
        self.listener = listener
        logger.debug(f"{self.__class__.__name__} listener set to {listener.__class__.__name__}")

    @abstractmethod
    def start(self) -> None:
        """Begin a listening pass.

        Returns immediately; the effect is observed through events.

        Raises:
            EngineAlreadyActiveError: If a listening pass is already running
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the current listening pass; an end event follows."""
        pass


EngineFactory = Callable[[], AbstractRecognitionEngine]
