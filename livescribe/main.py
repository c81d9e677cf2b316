"""Main application entry point for LiveScribe."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from .config import LiveScribeConfig
from .recognition.errors import UnsupportedEnvironmentError
from .recognition.google_engine import create_google_engine_factory
from .services.live_session import LiveTranscriptionSession
from .services.restart_scheduler import RestartPolicy
from .transcription.publisher import TranscriptPublisher
from .ui.transcript_console import TranscriptConsole

logger = logging.getLogger(__name__)


def setup_logging(config: LiveScribeConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/livescribe.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("="*50)
    logger.info("LiveScribe starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("="*50)


class Server:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        self.config = LiveScribeConfig(config_path)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.session: Optional[LiveTranscriptionSession] = None

    def init(self, loop: asyncio.AbstractEventLoop, language: Optional[str] = None) -> None:
        logger.info("Initializing session...")

        sample_rate = self.config.get('audio.sample_rate', 16000)
        chunk_size = self.config.get('audio.chunk_size', 1600)
        channels = self.config.get('audio.channels', 1)
        logger.info(f"Audio settings: {sample_rate}Hz, {chunk_size} samples/chunk, {channels} channels")

        # pyaudio comes with the microphone extra
        from .audio.capture import MicrophoneStream

        engine_factory = create_google_engine_factory(
            self.config,
            loop,
            audio_source_factory=lambda: MicrophoneStream(
                sample_rate=sample_rate,
                chunk_size=chunk_size,
                channels=channels,
            ),
        )
        self.session = LiveTranscriptionSession(
            engine_factory=engine_factory,
            language=language or self.config.get('recognition.language', 'en-US'),
            restart_policy=RestartPolicy.from_config(self.config),
            max_alternatives=self.config.get('recognition.max_alternatives', 3),
            loop=loop,
        )

        self.publisher = TranscriptPublisher()
        self.session.set_on_transcript_update(self.publisher.get_update_callback())
        self.session.set_on_error(self.publisher.get_error_callback())
        self.session.set_on_end(self.publisher.get_end_callback())
        self.transcript_console = TranscriptConsole(self.publisher)

    async def run(self, duration: int) -> str:
        with self.transcript_console:
            self.session.start()
            try:
                await asyncio.sleep(duration)
            finally:
                transcript = self.session.stop()
            # Let the engine report its end before leaving the loop
            await asyncio.sleep(self.session.restart_policy.default_delay)
        self.transcript_console.shutdown()
        return transcript


def main() -> None:
    """Main entry point for LiveScribe."""
    parser = argparse.ArgumentParser(
        description="LiveScribe - Continuous live transcription",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config)"
    )

    parser.add_argument(
        "--duration",
        type=int,
        default=60,
        help="Recording duration in seconds (default: 60)"
    )

    parser.add_argument(
        "--language",
        type=str,
        help="Recognition language tag, e.g. en-US or ur-PK (overrides config)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="LiveScribe v0.1.0"
    )

    args = parser.parse_args()

    server = Server(args.config, args.log_level)
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        server.init(loop, args.language)
        transcript = loop.run_until_complete(server.run(args.duration))
        print("\n📄 FINAL TRANSCRIPT:")
        print("-" * 40)
        print(transcript.strip())
    except KeyboardInterrupt:
        if server.session is not None:
            server.session.stop()
        print("\n👋 Goodbye!")
    except ImportError as e:
        print(f"❌ {e}. Microphone capture needs: pip install 'livescribe[microphone]'")
        sys.exit(1)
    except UnsupportedEnvironmentError as e:
        print(f"❌ {e}. Configure google_cloud.credentials_path.")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)
    finally:
        loop.close()


if __name__ == "__main__":
    main()
