"""Window-shift policy: which slice of the stream to decode next.

Until the stream is longer than max_window_sec, the whole stream is decoded
from offset 0. After that the window start jumps forward in whole shift_sec
steps so the slice never exceeds max_window_sec; the part of the previous
window that is re-decoded gives the recognizer context and is removed again
by the agreement de-duplication.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from streaming_transcript.audio.config import WindowConfig
from streaming_transcript.audio.history import AudioHistory


@dataclass(frozen=True)
class AudioWindow:
    """Absolute sample range [start_sample, end_sample) to decode."""

    start_sample: int
    end_sample: int
    sample_rate: int

    @property
    def offset(self) -> float:
        """Absolute window start in seconds (the agreement window offset)."""
        return self.start_sample / self.sample_rate

    @property
    def duration(self) -> float:
        return (self.end_sample - self.start_sample) / self.sample_rate

    @property
    def num_samples(self) -> int:
        return self.end_sample - self.start_sample


class WindowShiftPolicy:
    """Select decode windows from the total amount of audio received."""

    def __init__(self, config: Optional[WindowConfig] = None):
        self.config = config or WindowConfig()

    def window_start(self, total_samples: int) -> int:
        """Absolute start sample of the window for a stream of total_samples."""
        excess = total_samples - self.config.max_samples
        if excess <= 0:
            return 0
        shift = self.config.shift_samples
        return math.ceil(excess / shift) * shift

    def plan(self, total_samples: int) -> Optional[AudioWindow]:
        """Window to decode, or None when too little audio would be decoded."""
        start = self.window_start(total_samples)
        end = min(start + self.config.max_samples, total_samples)
        if end - start < self.config.min_samples or end <= start:
            return None
        return AudioWindow(start, end, self.config.sample_rate)

    def select(self, history: AudioHistory) -> Optional[tuple[AudioWindow, np.ndarray]]:
        """Plan a window over history and return it with its samples."""
        window = self.plan(history.total_samples)
        if window is None:
            return None
        return window, history.slice(window.start_sample, window.end_sample)
