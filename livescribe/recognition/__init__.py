"""Recognition engines for LiveScribe."""

from .base import AbstractRecognitionEngine, EngineListener, EngineFactory
from .errors import (
    LiveScribeError,
    UnsupportedEnvironmentError,
    EngineAlreadyActiveError,
    ErrorSeverity,
    classify_error,
    describe_error,
)
from .google_engine import GoogleStreamingEngine, create_google_engine_factory

__all__ = [
    "AbstractRecognitionEngine",
    "EngineListener",
    "EngineFactory",
    "LiveScribeError",
    "UnsupportedEnvironmentError",
    "EngineAlreadyActiveError",
    "ErrorSeverity",
    "classify_error",
    "describe_error",
    "GoogleStreamingEngine",
    "create_google_engine_factory",
]
