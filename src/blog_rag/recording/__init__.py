"""Recording module - append-only interaction log writer."""

from blog_rag.recording.recorder import (
    DEFAULT_LOGGING_TIMEOUT_S,
    InteractionRecorder,
)

__all__ = ["DEFAULT_LOGGING_TIMEOUT_S", "InteractionRecorder"]
