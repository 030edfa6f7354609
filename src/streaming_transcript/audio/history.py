"""Append-only audio store addressed by absolute sample index."""

import numpy as np


class AudioHistory:
    """Growing buffer of stream audio; old samples can be trimmed from the front.

    Sample indices are absolute (counted from stream start), so trimming
    never shifts the positions the window policy works with.
    """

    def __init__(self, dtype: type = np.float32):
        self.dtype = dtype
        self._data = np.zeros(0, dtype=dtype)
        self._start_sample = 0

    def push(self, chunk: np.ndarray) -> None:
        """Append a chunk of samples."""
        chunk = np.asarray(chunk, dtype=self.dtype).reshape(-1)
        if chunk.size == 0:
            return
        self._data = np.concatenate([self._data, chunk])

    @property
    def start_sample(self) -> int:
        """Absolute index of the oldest retained sample."""
        return self._start_sample

    @property
    def total_samples(self) -> int:
        """Samples pushed since the stream started (including trimmed ones)."""
        return self._start_sample + len(self._data)

    def slice(self, start: int, end: int) -> np.ndarray:
        """Return samples [start, end) in absolute indices (clipped to what is retained)."""
        lo = max(start, self._start_sample) - self._start_sample
        hi = max(min(end, self.total_samples) - self._start_sample, lo)
        return self._data[lo:hi].copy()

    def trim_before(self, sample: int) -> None:
        """Drop samples with absolute index < sample."""
        drop = min(sample, self.total_samples) - self._start_sample
        if drop <= 0:
            return
        self._data = self._data[drop:]
        self._start_sample += drop

    def clear(self) -> None:
        """Reset buffer."""
        self._data = np.zeros(0, dtype=self.dtype)
        self._start_sample = 0
