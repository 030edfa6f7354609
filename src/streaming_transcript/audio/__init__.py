"""Audio history and decode window selection."""

from streaming_transcript.audio.config import WindowConfig
from streaming_transcript.audio.history import AudioHistory
from streaming_transcript.audio.window import AudioWindow, WindowShiftPolicy

__all__ = [
    "AudioHistory",
    "AudioWindow",
    "WindowConfig",
    "WindowShiftPolicy",
]
