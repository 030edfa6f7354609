"""Decoding window configuration.

Encoding standards:
- Audio: mono 16 kHz float32
- Window: at most 15 s decoded per update, advanced in 5 s steps
- Minimum decodable window: 0.5 s
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class WindowConfig:
    """Sliding decode window parameters."""

    sample_rate: int = 16_000

    # Longest audio slice handed to the recognizer
    max_window_sec: float = 15.0
    # Step the window start moves by once audio exceeds max_window_sec
    shift_sec: float = 5.0
    # Shorter slices are not decoded
    min_window_sec: float = 0.5

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError("sample_rate must be > 0")
        if self.max_window_sec <= 0 or self.shift_sec <= 0:
            raise ValueError("max_window_sec and shift_sec must be > 0")
        if self.shift_sec > self.max_window_sec:
            raise ValueError("shift_sec must be <= max_window_sec")
        if self.min_window_sec < 0:
            raise ValueError("min_window_sec must be >= 0")

    @property
    def max_samples(self) -> int:
        return int(self.max_window_sec * self.sample_rate)

    @property
    def shift_samples(self) -> int:
        return int(self.shift_sec * self.sample_rate)

    @property
    def min_samples(self) -> int:
        return int(self.min_window_sec * self.sample_rate)
