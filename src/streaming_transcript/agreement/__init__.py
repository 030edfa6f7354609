"""Local agreement strategies: timestamp-aware (default) and plain-text."""

from typing import Optional

from streaming_transcript.agreement.base import AgreementProcessor
from streaming_transcript.agreement.config import AgreementConfig
from streaming_transcript.agreement.hypothesis_buffer import HypothesisBuffer
from streaming_transcript.agreement.plain_text import PlainTextAgreement
from streaming_transcript.agreement.words import Hypothesis, TranscriptUpdate, Word, normalize_words

STRATEGIES = {
    "timestamp": HypothesisBuffer,
    "plain": PlainTextAgreement,
}


def create_processor(strategy: str = "timestamp", config: Optional[AgreementConfig] = None) -> AgreementProcessor:
    """Return a new processor for one stream.

    Args:
        strategy: "timestamp" for word-level time-stamped hypotheses,
                  "plain" for recognizers that only return text.
        config: Tuning parameters (defaults if None).
    """
    try:
        cls = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unknown agreement strategy {strategy!r}; expected one of {sorted(STRATEGIES)}") from None
    return cls(config)


__all__ = [
    "AgreementConfig",
    "AgreementProcessor",
    "Hypothesis",
    "HypothesisBuffer",
    "PlainTextAgreement",
    "STRATEGIES",
    "TranscriptUpdate",
    "Word",
    "create_processor",
    "normalize_words",
]
