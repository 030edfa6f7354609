"""Common interface for agreement strategies.

Both strategies take one recognizer hypothesis per decode plus the absolute
start time of the decoded window, and report committed/tentative text:

  processor = create_processor("timestamp")
  update = processor.process(hypothesis, window_offset)
  update.committed, update.tentative
  processor.finalize()   # end of stream: accept remaining tentative words
  processor.reset()      # new recording
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List

from streaming_transcript.agreement.words import TranscriptUpdate, Word


class AgreementProcessor(ABC):
    """One stream's agreement state. Not thread-safe; one instance per session."""

    @abstractmethod
    def process(self, hypothesis: Any, window_offset: float = 0.0) -> TranscriptUpdate:
        """Reconcile a new hypothesis against the previous one."""
        raise NotImplementedError

    @abstractmethod
    def finalize(self) -> TranscriptUpdate:
        """Commit all remaining tentative content unconditionally."""
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        """Clear all state for a new stream."""
        raise NotImplementedError

    @abstractmethod
    def pop_committed(self, before_time: float) -> None:
        """Drop lookback words ending at or before before_time."""
        raise NotImplementedError

    @property
    @abstractmethod
    def committed_text(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def tentative_text(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def all_committed_words(self) -> List[Word]:
        raise NotImplementedError

    def get_committed_text(self) -> str:
        return self.committed_text

    def get_all_committed_words(self) -> List[Word]:
        return self.all_committed_words

    def current_update(self) -> TranscriptUpdate:
        """Current state without consuming a hypothesis."""
        return TranscriptUpdate(self.committed_text, self.tentative_text)
