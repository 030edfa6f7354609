"""Streaming transcript reconciliation - local agreement, window policy, session."""

from streaming_transcript.agreement import (
    AgreementConfig,
    HypothesisBuffer,
    PlainTextAgreement,
    TranscriptUpdate,
    Word,
    create_processor,
)
from streaming_transcript.text import tokenize

__all__ = [
    "AgreementConfig",
    "HypothesisBuffer",
    "PlainTextAgreement",
    "TranscriptUpdate",
    "Word",
    "create_processor",
    "tokenize",
]
