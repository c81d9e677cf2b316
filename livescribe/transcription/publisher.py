"""Transcript publisher module for pub/sub event publishing."""

import logging
from typing import Callable
from pubsub import pub

from ..models.transcription import TranscriptUpdate

logger = logging.getLogger(__name__)


class TranscriptPublisher:
    """Publishes session notifications using pubsub.pub."""

    def __init__(self, topic_prefix: str = "transcript"):
        """Initialize transcript publisher.

        Args:
            topic_prefix: Root of the topic tree; messages go to
                <prefix>.update, <prefix>.error and <prefix>.end
        """
        self.update_topic = f"{topic_prefix}.update"
        self.error_topic = f"{topic_prefix}.error"
        self.end_topic = f"{topic_prefix}.end"
        logger.info(f"TranscriptPublisher initialized with topic prefix: {topic_prefix}")

    def publish_update(self, update: TranscriptUpdate) -> None:
        pub.sendMessage(self.update_topic, update=update)
        logger.debug(f"Published transcript update ({len(update.final)} final chars)")

    def publish_error(self, kind: str) -> None:
        pub.sendMessage(self.error_topic, kind=kind)
        logger.debug(f"Published recognition error: {kind}")

    def publish_end(self, transcript: str) -> None:
        pub.sendMessage(self.end_topic, transcript=transcript)
        logger.debug(f"Published end of session ({len(transcript)} chars)")

    def get_update_callback(self) -> Callable[[TranscriptUpdate], None]:
        """Get callback for LiveTranscriptionSession.set_on_transcript_update."""
        return self.publish_update

    def get_error_callback(self) -> Callable[[str], None]:
        """Get callback for LiveTranscriptionSession.set_on_error."""
        return self.publish_error

    def get_end_callback(self) -> Callable[[str], None]:
        """Get callback for LiveTranscriptionSession.set_on_end."""
        return self.publish_end
