"""Console display of a live transcript, fed by pub/sub notifications."""

import logging
from typing import Optional

from pubsub import pub
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ..models.transcription import TranscriptUpdate
from ..recognition.errors import ErrorSeverity, classify_error, describe_error
from ..transcription.publisher import TranscriptPublisher

logger = logging.getLogger(__name__)


class TranscriptConsole:
    """Renders final and interim text as they arrive."""

    def __init__(self, publisher: TranscriptPublisher, console: Optional[Console] = None):
        """Initialize transcript console.

        Args:
            publisher: Publisher whose topics this console subscribes to
            console: Rich console to render on
        """
        self.publisher = publisher
        self.console = console or Console()
        self.final_text = ""
        self.interim_text = ""
        self.last_error: Optional[str] = None
        self.end_transcript: Optional[str] = None
        self.live: Optional[Live] = None

        pub.subscribe(self.on_update, publisher.update_topic)
        pub.subscribe(self.on_error, publisher.error_topic)
        pub.subscribe(self.on_end, publisher.end_topic)
        logger.info(f"TranscriptConsole subscribed to {publisher.update_topic}")

    def render(self) -> Panel:
        body = Text(self.final_text)
        body.append(self.interim_text, style="dim italic")
        return Panel(body, title="🎙️  Live transcript", subtitle=self.last_error, border_style="blue")

    def __enter__(self) -> "TranscriptConsole":
        self.live = Live(self.render(), console=self.console, refresh_per_second=8)
        self.live.__enter__()
        return self

    def __exit__(self, *args) -> None:
        if self.live is not None:
            self.live.__exit__(*args)
            self.live = None

    def _refresh(self) -> None:
        if self.live is not None:
            self.live.update(self.render())

    def on_update(self, update: TranscriptUpdate) -> None:
        self.final_text = update.final
        self.interim_text = update.interim
        self.last_error = None
        self._refresh()

    def on_error(self, kind: str) -> None:
        self.last_error = describe_error(kind)
        if classify_error(kind) is ErrorSeverity.FATAL:
            self.console.print(f"❌ {self.last_error}", style="bold red")
        self._refresh()

    def on_end(self, transcript: str) -> None:
        self.end_transcript = transcript

    def shutdown(self) -> None:
        try:
            pub.unsubscribe(self.on_update, self.publisher.update_topic)
            pub.unsubscribe(self.on_error, self.publisher.error_topic)
            pub.unsubscribe(self.on_end, self.publisher.end_topic)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")
