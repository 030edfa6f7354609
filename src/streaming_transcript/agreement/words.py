"""Word-level data model shared by the agreement strategies."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Sequence, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Word:
    """One recognized word on the stream timeline (seconds)."""

    text: str
    start: float
    end: float

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Word":
        """Build a Word from a recognizer dict.

        Accepts either {"text", "start", "end"} or the chunk form
        {"text", "timestamp": [start, end]} returned by Whisper pipelines
        with word-level timestamps. A missing start is 0.0, a missing end
        falls back to start. Times that are not numbers raise ValueError or
        TypeError.
        """
        text = data.get("text")
        text = "" if text is None else str(text)
        if "timestamp" in data:
            stamp = data["timestamp"] or (None, None)
            start = stamp[0] if len(stamp) > 0 else None
            end = stamp[1] if len(stamp) > 1 else None
        else:
            start = data.get("start")
            end = data.get("end")
        if start is None:
            start = 0.0
        if end is None:
            end = start
        return cls(text=text, start=float(start), end=float(end))

    def shifted(self, offset: float) -> "Word":
        """Copy of this word moved by offset seconds."""
        return Word(self.text, self.start + offset, self.end + offset)

    def to_dict(self) -> dict:
        return {"text": self.text, "start": self.start, "end": self.end}


WordLike = Union[Word, Mapping[str, Any]]
Hypothesis = Sequence[Word]


@dataclass(frozen=True)
class TranscriptUpdate:
    """Committed (stable) and tentative (may still change) transcript text."""

    committed: str
    tentative: str = ""

    @property
    def text(self) -> str:
        """Full running transcript: committed followed by tentative."""
        if not self.tentative:
            return self.committed
        if not self.committed:
            return self.tentative
        return self.committed + " " + self.tentative


def normalize_words(words: Iterable[WordLike]) -> List[Word]:
    """Coerce and sanitize recognizer words.

    - Dicts are converted with Word.from_mapping
    - Text is stripped; empty words are dropped
    - Non-finite or non-numeric timestamps are dropped
    - end < start is clamped to end = start
    Order is preserved as supplied by the recognizer.
    """
    result: List[Word] = []
    for item in words:
        if isinstance(item, Word):
            word = item
        else:
            try:
                word = Word.from_mapping(item)
            except (TypeError, ValueError):
                logger.debug("Dropping word with unusable times: %r", item)
                continue
        text = word.text.strip()
        if not text:
            continue
        if not (math.isfinite(word.start) and math.isfinite(word.end)):
            logger.debug("Dropping word %r with non-finite times (%s, %s)", text, word.start, word.end)
            continue
        end = word.end
        if end < word.start:
            logger.debug("Clamping end of %r: %.3f -> %.3f", text, end, word.start)
            end = word.start
        if text != word.text or end != word.end:
            word = Word(text, word.start, end)
        result.append(word)
    return result
