"""Text helpers for recognizer output (tokenizing, joining, cleanup)."""

import re
from typing import Iterable, List

# Non-speech markers some recognizers emit for silent windows
_NON_SPEECH_MARKERS = re.compile(r"\[(BLANK_AUDIO|SILENCE|NO_SPEECH)\]", re.IGNORECASE)


def tokenize(text: str) -> List[str]:
    """Split text into words on runs of whitespace, dropping empty tokens."""
    if not text:
        return []
    return text.split()


def join_words(words: Iterable[str]) -> str:
    """Join word texts with single spaces."""
    return " ".join(w for w in words if w)


def append_text(existing: str, addition: str) -> str:
    """Append addition to existing with a single separating space."""
    if not addition:
        return existing
    if not existing:
        return addition
    return existing + " " + addition


def words_match(a: str, b: str) -> bool:
    """Case-insensitive word comparison used for agreement and de-duplication."""
    return a.lower() == b.lower()


def clean_transcript(raw: str) -> str:
    """Normalize raw recognizer text before agreement.

    Handles:
    - [BLANK_AUDIO] style non-speech markers
    - Multiple spaces / newlines
    """
    if not raw:
        return ""
    text = _NON_SPEECH_MARKERS.sub("", raw)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def common_prefix_length(previous: List[str], current: List[str]) -> int:
    """Number of leading words that match (case-insensitive) in both lists."""
    count = 0
    for prev_word, cur_word in zip(previous, current):
        if not words_match(prev_word, cur_word):
            break
        count += 1
    return count


def suffix_prefix_overlap(suffix: List[str], words: List[str], min_overlap: int = 1) -> int:
    """Longest overlap between the end of suffix and the start of words.

    E.g. suffix=['one', 'two', 'three'], words=['two', 'three', 'four']
    -> 2. Overlaps shorter than min_overlap are ignored (returns 0).
    """
    if not suffix or not words:
        return 0
    for size in range(min(len(suffix), len(words)), min_overlap - 1, -1):
        if size <= 0:
            break
        if all(words_match(a, b) for a, b in zip(suffix[-size:], words[:size])):
            return size
    return 0
