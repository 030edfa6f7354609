"""Plain-text local agreement for recognizers without word timestamps.

Works on word positions instead of times:
- Same window: the matching prefix of the previous and the current
  hypothesis is locked (it only grows within a window).
- Window shift (offset moved by more than shift_threshold): locked words
  are folded into the committed transcript and the longest overlap between
  the committed suffix and the new hypothesis is skipped.

Less robust than HypothesisBuffer when the window moves; repeated words
("the the") can be mistaken for overlap. Use it only when the recognizer
returns plain text.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, List, Optional

from streaming_transcript.agreement.base import AgreementProcessor
from streaming_transcript.agreement.config import AgreementConfig
from streaming_transcript.agreement.words import TranscriptUpdate, Word
from streaming_transcript.text import (
    append_text,
    clean_transcript,
    common_prefix_length,
    join_words,
    suffix_prefix_overlap,
    tokenize,
)

logger = logging.getLogger(__name__)


def _hypothesis_words(hypothesis: Any) -> List[str]:
    if isinstance(hypothesis, str):
        return tokenize(clean_transcript(hypothesis))
    # Word lists are accepted too; only their text is used
    texts = [w.text if isinstance(w, Word) else str(w.get("text", "")) for w in hypothesis]
    return tokenize(clean_transcript(" ".join(texts)))


class PlainTextAgreement(AgreementProcessor):
    """Position-counted agreement over plain text hypotheses.

    Words carry no real timing: each committed Word gets start = end = the
    window offset of the decode that produced it.
    """

    def __init__(self, config: Optional[AgreementConfig] = None):
        self.config = config or AgreementConfig()
        self._folded: List[Word] = []
        self._folded_text = ""
        self._suffix: Deque[Word] = deque(maxlen=self.config.tail_size)
        self._locked: List[Word] = []
        self._previous: List[str] = []
        self._tentative: List[str] = []
        self._last_window_start = 0.0

    def process(self, hypothesis: Any, window_offset: float = 0.0) -> TranscriptUpdate:
        """Ingest one plain-text hypothesis for the window starting at window_offset."""
        words = _hypothesis_words(hypothesis)
        if not words:
            return self.current_update()

        if window_offset > self._last_window_start + self.config.shift_threshold:
            self._handle_window_shift(words, window_offset)
        else:
            self._handle_same_window(words, window_offset)
        return self.current_update()

    def _handle_window_shift(self, words: List[str], window_offset: float) -> None:
        logger.debug("Window shift: %.1fs -> %.1fs", self._last_window_start, window_offset)
        self._fold(self._locked)
        self._locked = []

        duplicates = self._overlap_with_suffix(words)
        new_words = words[duplicates:]
        logger.debug("Skipped %d duplicate words, %d new words", duplicates, len(new_words))

        self._previous = new_words
        self._tentative = list(new_words)
        self._last_window_start = window_offset

    def _handle_same_window(self, words: List[str], window_offset: float) -> None:
        self._last_window_start = window_offset

        # The window still re-decodes audio that was folded at the last shift
        words = words[self._overlap_with_suffix(words) :]

        locked_count = len(self._locked)
        match = common_prefix_length(self._previous, words)
        if match > locked_count:
            self._locked.extend(Word(text, window_offset, window_offset) for text in words[locked_count:match])
            locked_count = match
        self._previous = words

        tentative = words[locked_count:]
        lookback = [w.text for w in self._suffix] + [w.text for w in self._locked]
        lookback = lookback[-self.config.tail_size :]
        duplicates = suffix_prefix_overlap(lookback, tentative, self.config.min_overlap)
        if duplicates:
            logger.debug("Filtered %d duplicate words from tentative", duplicates)
            tentative = tentative[duplicates:]
        self._tentative = tentative

    def _overlap_with_suffix(self, words: List[str]) -> int:
        return suffix_prefix_overlap([w.text for w in self._suffix], words, self.config.min_overlap)

    def _fold(self, words: List[Word]) -> None:
        for word in words:
            self._folded.append(word)
            self._suffix.append(word)
            self._folded_text = append_text(self._folded_text, word.text)

    def finalize(self) -> TranscriptUpdate:
        """Fold locked and tentative words into the committed transcript."""
        remaining = self._locked + [
            Word(text, self._last_window_start, self._last_window_start) for text in self._tentative
        ]
        self._locked = []
        self._previous = []
        self._tentative = []
        if remaining:
            self._fold(remaining)
            logger.info("Finalized %d words", len(remaining))
        return TranscriptUpdate(self._folded_text, "")

    def reset(self) -> None:
        self._folded = []
        self._folded_text = ""
        self._suffix.clear()
        self._locked = []
        self._previous = []
        self._tentative = []
        self._last_window_start = 0.0

    def pop_committed(self, before_time: float) -> None:
        """No-op: words carry no real timing, the lookback is bounded by tail_size only."""

    @property
    def committed_text(self) -> str:
        return append_text(self._folded_text, join_words(w.text for w in self._locked))

    @property
    def tentative_text(self) -> str:
        return join_words(self._tentative)

    @property
    def all_committed_words(self) -> List[Word]:
        return self._folded + self._locked
