"""Recording session wiring audio windows, recognizer and agreement."""

from streaming_transcript.pipeline.session import SessionConfig, TranscriptionSession

__all__ = ["SessionConfig", "TranscriptionSession"]
