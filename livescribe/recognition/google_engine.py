"""Google Speech-to-Text streaming recognition engine."""

import asyncio
import logging
import threading
from typing import Any, Callable, ContextManager, Iterable, Iterator, List, Optional

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

from .base import AbstractRecognitionEngine, EngineFactory
from .errors import AUDIO_CAPTURE, NETWORK, NOT_ALLOWED, OTHER, EngineAlreadyActiveError
from ..config import LiveScribeConfig
from ..models.transcription import AlternativeCandidate, RecognitionResult

logger = logging.getLogger(__name__)

AudioSourceFactory = Callable[[], ContextManager[Iterable[bytes]]]


class GoogleStreamingEngine(AbstractRecognitionEngine):
    """Continuous recognition over Google streaming_recognize.

    Each start() opens one listening pass on a worker thread. The pass ends
    when stop() is called, when the audio source runs dry, or when the
    service closes the stream (it caps stream duration). Events are handed
    to the listener on the owning event loop, in emission order.
    """

    def __init__(self,
                 client: speech.SpeechClient,
                 audio_source_factory: AudioSourceFactory,
                 loop: asyncio.AbstractEventLoop,
                 sample_rate: int = 16000,
                 language: str = "en-US",
                 model: str = "latest_long",
                 enable_automatic_punctuation: bool = True,
                 interim_results: bool = True,
                 max_alternatives: int = 3):
        """Initialize Google streaming engine.

        Args:
            client: Authenticated SpeechClient
            audio_source_factory: Returns a context manager yielding PCM chunks
            loop: Event loop on which listener callbacks run
            sample_rate: Sample rate of the audio source in Hz
            language: Language code (e.g., 'en-US', 'ur-PK')
            model: Recognition model name
            enable_automatic_punctuation: Enable automatic punctuation
        """
        super().__init__(language, interim_results, max_alternatives)
        self.client = client
        self.audio_source_factory = audio_source_factory
        self.loop = loop
        self.sample_rate = sample_rate
        self.model = model
        self.enable_automatic_punctuation = enable_automatic_punctuation

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._source: Optional[Any] = None

    @property
    def is_listening(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_listening:
            raise EngineAlreadyActiveError("Google streaming recognition is already running")

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._listen, daemon=True)
        self._thread.name = "GoogleStreamingEngine"
        self._thread.start()
        logger.debug(f"Listening pass started (language: {self.language})")

    def stop(self) -> None:
        if not self.is_listening:
            return
        self._stop_event.set()
        source = self._source
        if source is not None and hasattr(source, "close"):
            source.close()
        logger.debug("Listening pass stop requested")

    def build_streaming_config(self) -> speech.StreamingRecognitionConfig:
        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=self.sample_rate,
            language_code=self.language,
            max_alternatives=self.max_alternatives,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
            model=self.model,
        )
        return speech.StreamingRecognitionConfig(
            config=config,
            interim_results=self.interim_results,
        )

    def _listen(self) -> None:
        """Worker thread: run one listening pass and report its events."""
        streaming_config = self.build_streaming_config()
        self._emit(self.listener.on_start)
        try:
            with self.audio_source_factory() as source:
                self._source = source
                requests = (
                    speech.StreamingRecognizeRequest(audio_content=chunk)
                    for chunk in self._audio_chunks(source)
                )
                responses = self.client.streaming_recognize(config=streaming_config, requests=requests)
                for response in responses:
                    results = self.convert_response(response)
                    if results:
                        self._emit(self.listener.on_result, results)
        except OSError as e:
            logger.error(f"Audio source failed: {e}")
            self._emit(self.listener.on_error, AUDIO_CAPTURE)
        except gax_exceptions.OutOfRange as e:
            # Stream duration limit reached; the pass simply ends
            logger.info(f"Streaming pass closed by service: {e}")
        except gax_exceptions.GoogleAPICallError as e:
            kind = self.classify_api_error(e)
            logger.error(f"Google STT streaming error ({kind}): {e}")
            self._emit(self.listener.on_error, kind)
        except Exception as e:
            logger.error(f"Unexpected error in streaming pass: {e}", exc_info=True)
            self._emit(self.listener.on_error, OTHER)
        finally:
            self._source = None
            self._emit(self.listener.on_end)

    def _audio_chunks(self, source: Iterable[bytes]) -> Iterator[bytes]:
        for chunk in source:
            if self._stop_event.is_set():
                return
            yield chunk

    def _emit(self, handler: Callable, *args) -> None:
        self.loop.call_soon_threadsafe(handler, *args)

    def convert_response(self, response: Any) -> List[RecognitionResult]:
        """Convert a StreamingRecognizeResponse into a result batch."""
        batch = []
        for result in response.results:
            if not result.alternatives:
                continue
            primary = result.alternatives[0]
            alternatives = [
                AlternativeCandidate(text=alt.transcript, confidence=alt.confidence)
                for alt in result.alternatives[:self.max_alternatives]
            ]
            batch.append(RecognitionResult(
                text=primary.transcript,
                confidence=primary.confidence,
                is_final=result.is_final,
                alternatives=alternatives,
            ))
        return batch

    @staticmethod
    def classify_api_error(error: gax_exceptions.GoogleAPICallError) -> str:
        """Map a Google API error onto a recognition error kind."""
        if isinstance(error, (gax_exceptions.DeadlineExceeded, gax_exceptions.ServiceUnavailable)):
            return NETWORK
        if isinstance(error, (gax_exceptions.PermissionDenied, gax_exceptions.Unauthenticated)):
            return NOT_ALLOWED
        status = getattr(error, "grpc_status_code", None)
        if status is not None:
            return status.name.lower().replace("_", "-")
        return error.__class__.__name__.lower()


def create_google_engine_factory(config: LiveScribeConfig,
                                 loop: asyncio.AbstractEventLoop,
                                 audio_source_factory: AudioSourceFactory) -> Optional[EngineFactory]:
    """Build an engine factory from configuration.

    Returns:
        A factory, or None when no Google credentials are available
    """
    credentials_path = config.get_google_credentials_path()
    if not credentials_path:
        logger.warning("Google credentials not configured, speech recognition unavailable")
        return None

    def factory() -> GoogleStreamingEngine:
        logger.info(f"Loading Google credentials from: {credentials_path}")
        credentials = service_account.Credentials.from_service_account_file(credentials_path)
        client = speech.SpeechClient(credentials=credentials)
        logger.info(f"Using Google Cloud project: {credentials.project_id}")
        return GoogleStreamingEngine(
            client=client,
            audio_source_factory=audio_source_factory,
            loop=loop,
            sample_rate=config.get('audio.sample_rate', 16000),
            language=config.get('recognition.language', 'en-US'),
            model=config.get('google_cloud.model', 'latest_long'),
            enable_automatic_punctuation=config.get('google_cloud.enable_automatic_punctuation', True),
            interim_results=config.get('recognition.interim_results', True),
            max_alternatives=config.get('recognition.max_alternatives', 3),
        )

    return factory
