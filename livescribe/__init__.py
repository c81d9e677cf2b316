"""LiveScribe: continuous live transcription over restartable recognition engines."""

__version__ = "0.1.0"
