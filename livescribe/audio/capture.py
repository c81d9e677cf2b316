"""Microphone audio source for streaming recognition engines."""

import logging
import queue
from typing import Iterator, Optional

import numpy as np
import pyaudio

logger = logging.getLogger(__name__)


class MicrophoneStream:
    """Opens the default input device and yields 16-bit PCM chunks.

    Chunks are produced by the PyAudio callback thread and consumed by
    iterating the stream, until close() is called.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1600,
        channels: int = 1,
        format: int = pyaudio.paInt16,
    ):
        """Initialize microphone stream.

        Args:
            sample_rate: Audio sample rate in Hz
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
        """
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format

        self.buffer: "queue.Queue[Optional[bytes]]" = queue.Queue()
        self.closed = True
        self.total_chunks = 0
        self.peak_level = 0.0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    def __enter__(self) -> "MicrophoneStream":
        self.open()
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def open(self) -> None:
        """Open the input device.

        Raises:
            OSError: If no input device is available
        """
        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            self.stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
                stream_callback=self._fill_buffer,
            )
        except OSError:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
            raise
        self.closed = False
        logger.info(f"Microphone stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.stream is not None:
            self.stream.stop_stream()
            self.stream.close()
            self.stream = None
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
        # Wake up a consumer blocked on the buffer
        self.buffer.put(None)
        logger.info(f"Microphone stream closed. Total chunks: {self.total_chunks}")

    def _fill_buffer(self, in_data, frame_count, time_info, status_flags):
        self.total_chunks += 1
        self.peak_level = self.measure_peak(in_data)
        self.buffer.put(in_data)
        return None, pyaudio.paContinue

    @staticmethod
    def measure_peak(audio_chunk: bytes) -> float:
        """Peak amplitude of a 16-bit PCM chunk, in [0, 1]."""
        samples = np.frombuffer(audio_chunk, dtype=np.int16)
        if samples.size == 0:
            return 0.0
        return float(np.abs(samples.astype(np.int32)).max()) / 32768.0

    def __iter__(self) -> Iterator[bytes]:
        while not self.closed:
            chunk = self.buffer.get()
            if chunk is None:
                return
            yield chunk
