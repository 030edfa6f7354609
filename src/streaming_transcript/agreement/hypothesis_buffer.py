"""Timestamp-aware local agreement: commit words two consecutive decodes agree on.

The recognizer re-decodes an overlapping audio window from scratch on every
update. A word becomes committed (permanent) only once two consecutive
hypotheses produce it at the same position; everything after the first
disagreement stays tentative and may be rewritten by the next decode.

Pipeline: window policy -> recognizer -> HypothesisBuffer -> display

Per process() call:
  1. shift word times by the window offset (absolute stream time)
  2. drop words at or before the committed frontier (with tolerance)
  3. drop a re-emitted n-gram of already committed words at the frontier
  4. commit the common prefix of the previous and the new hypothesis
  5. the uncommitted rest becomes the reference for the next call
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Iterable, List, Optional

from streaming_transcript.agreement.base import AgreementProcessor
from streaming_transcript.agreement.config import AgreementConfig
from streaming_transcript.agreement.words import TranscriptUpdate, Word, WordLike, normalize_words
from streaming_transcript.text import append_text, join_words, words_match

logger = logging.getLogger(__name__)


class HypothesisBuffer(AgreementProcessor):
    """Local agreement over word-level time-stamped hypotheses.

    - Committed: words two consecutive hypotheses agreed on; append-only.
    - Tentative: the latest hypothesis past the agreed prefix.

    Interface:
      buf = HypothesisBuffer()
      update = buf.process([Word("Hello", 0.0, 0.5)], window_offset=0.0)
      update.committed, update.tentative
      buf.finalize()   # end of stream: accept tentative words as-is
      buf.reset()      # new recording
    """

    def __init__(self, config: Optional[AgreementConfig] = None):
        self.config = config or AgreementConfig()
        self.buffer: List[Word] = []
        self.pending_new: List[Word] = []
        self.committed_tail: Deque[Word] = deque(maxlen=self.config.tail_size)
        self._all_committed: List[Word] = []
        self._committed_text = ""
        self._last_committed_time = 0.0

    def process(self, hypothesis: Iterable[WordLike], window_offset: float = 0.0) -> TranscriptUpdate:
        """Ingest one hypothesis with window-relative times.

        Args:
            hypothesis: Words (or {"text", "start", "end"} dicts) from one
                recognizer call, times relative to the decoded window.
            window_offset: Absolute start time of the decoded window (s).

        Returns:
            TranscriptUpdate with the full committed text and the tentative tail.
        """
        if isinstance(hypothesis, str):
            raise TypeError("HypothesisBuffer needs time-stamped words; use the plain-text strategy for text")
        words = [w.shifted(window_offset) for w in normalize_words(hypothesis)]
        self._insert(words)
        committed = self._flush()
        if committed:
            logger.debug("Committed %d words: %s", len(committed), join_words(w.text for w in committed))
        return self.current_update()

    def _insert(self, words: List[Word]) -> None:
        """Fill pending_new with the non-stale part of words, minus boundary duplicates."""
        threshold = self._last_committed_time - self.config.stale_tolerance
        self.pending_new = [w for w in words if w.start > threshold]
        stale = len(words) - len(self.pending_new)
        if stale:
            logger.debug("Dropped %d stale words (frontier %.2fs)", stale, self._last_committed_time)

        if not self.pending_new or not self.committed_tail:
            return
        if abs(self.pending_new[0].start - self._last_committed_time) >= self.config.dedup_window:
            return

        tail = list(self.committed_tail)
        limit = min(len(tail), len(self.pending_new), self.config.max_ngram)
        # Smallest matching n-gram wins
        for i in range(1, limit + 1):
            committed_ngram = join_words(w.text for w in tail[-i:])
            new_ngram = join_words(w.text for w in self.pending_new[:i])
            if words_match(committed_ngram, new_ngram):
                removed = self.pending_new[:i]
                del self.pending_new[:i]
                logger.debug("Removed %d-gram overlap: %s", i, join_words(w.text for w in removed))
                break

    def _flush(self) -> List[Word]:
        """Commit the agreed prefix of buffer and pending_new; pending_new becomes the buffer."""
        commit: List[Word] = []
        previous = self.buffer
        new = self.pending_new
        n = 0
        while n < len(previous) and n < len(new) and words_match(previous[n].text, new[n].text):
            commit.append(new[n])
            n += 1

        self.buffer = new[n:]
        self.pending_new = []
        self._commit(commit)
        return commit

    def _commit(self, words: List[Word]) -> None:
        for word in words:
            self._all_committed.append(word)
            self.committed_tail.append(word)
            self._committed_text = append_text(self._committed_text, word.text)
            self._last_committed_time = max(self._last_committed_time, word.end)

    def finalize(self) -> TranscriptUpdate:
        """Commit every remaining tentative word without an agreement check.

        At end of stream there is no next hypothesis to agree with, so the
        current best guess is accepted. Calling it again is a no-op.
        """
        remaining = self.buffer + self.pending_new
        self.buffer = []
        self.pending_new = []
        if remaining:
            self._commit(remaining)
            logger.info("Finalized %d tentative words", len(remaining))
        return TranscriptUpdate(self._committed_text, "")

    def reset(self) -> None:
        """Clear all state (new recording or discarded one)."""
        self.buffer = []
        self.pending_new = []
        self.committed_tail.clear()
        self._all_committed = []
        self._committed_text = ""
        self._last_committed_time = 0.0

    def pop_committed(self, before_time: float) -> None:
        """Forget lookback words that end at or before before_time.

        Only the de-duplication lookback is trimmed; the committed transcript
        is untouched.
        """
        while self.committed_tail and self.committed_tail[0].end <= before_time:
            self.committed_tail.popleft()

    @property
    def last_committed_time(self) -> float:
        """End time of the most recently committed word."""
        return self._last_committed_time

    @property
    def committed_text(self) -> str:
        return self._committed_text

    @property
    def tentative_text(self) -> str:
        return join_words(w.text for w in self.buffer)

    @property
    def tentative_words(self) -> List[Word]:
        return list(self.buffer)

    @property
    def all_committed_words(self) -> List[Word]:
        return list(self._all_committed)
