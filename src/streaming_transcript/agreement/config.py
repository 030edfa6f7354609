"""Local agreement tuning parameters.

Defaults:
- Stale tolerance: 0.1 s (absorbs word boundary jitter at the committed frontier)
- De-duplication window: 1.0 s around the committed frontier
- n-gram de-duplication: up to 5 words, smallest match wins
- Committed lookback: last 45 words
- Plain-text strategy: window shift threshold 0.5 s, minimum overlap 2 words
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AgreementConfig:
    """Configuration shared by the agreement strategies."""

    # Timestamp-aware buffer
    stale_tolerance: float = 0.1
    dedup_window: float = 1.0
    max_ngram: int = 5

    # Bounded lookback of committed words used for de-duplication
    tail_size: int = 45

    # Plain-text strategy
    shift_threshold: float = 0.5
    min_overlap: int = 2

    def __post_init__(self) -> None:
        if self.stale_tolerance < 0:
            raise ValueError("stale_tolerance must be >= 0")
        if self.dedup_window < 0:
            raise ValueError("dedup_window must be >= 0")
        if self.max_ngram < 1:
            raise ValueError("max_ngram must be >= 1")
        if self.tail_size < 1:
            raise ValueError("tail_size must be >= 1")
        if self.shift_threshold < 0:
            raise ValueError("shift_threshold must be >= 0")
        if self.min_overlap < 1:
            raise ValueError("min_overlap must be >= 1")
