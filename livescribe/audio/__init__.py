"""Audio sources for recognition engines."""

from .capture import MicrophoneStream

__all__ = [
    'MicrophoneStream',
]
