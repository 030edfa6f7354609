"""Replay a simulated live recording through a transcription session.

A scripted recognizer stands in for the ASR model: it "hears" the words
whose audio lies inside the decoded window and sometimes garbles the last
one, the way a decoder does near the right edge of its context.

Usage:
  python replay_example.py                 # 20 s recording, 1 s updates
  python replay_example.py --plain         # plain-text strategy
  python replay_example.py --duration 40   # longer recording (more window shifts)
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

import numpy as np

from streaming_transcript.agreement import Word, create_processor
from streaming_transcript.audio import WindowConfig, WindowShiftPolicy
from streaming_transcript.pipeline import TranscriptionSession

SAMPLE_RATE = 16_000
SCRIPT = (
    "the quick brown fox jumps over the lazy dog while the band plays on "
    "and everyone in the room keeps talking about the weather"
).split()


def scripted_words(duration: float):
    """One word every 0.45 s, each 0.35 s long."""
    words = []
    t = 0.0
    i = 0
    while t + 0.35 <= duration:
        words.append(Word(SCRIPT[i % len(SCRIPT)], t, t + 0.35))
        t += 0.45
        i += 1
    return words


def make_recognizer(words, plain: bool, seed: int = 0):
    rng = np.random.default_rng(seed)

    def transcribe(audio: np.ndarray):
        # Audio is a time ramp, so the first sample is the window start
        start = float(audio[0])
        end = start + len(audio) / SAMPLE_RATE
        heard = [Word(w.text, w.start - start, w.end - start) for w in words if w.start >= start and w.end <= end]
        if heard and rng.random() < 0.3:
            last = heard[-1]
            heard[-1] = Word(last.text[:-1] or "uh", last.start, last.end)
        if plain:
            return " ".join(w.text for w in heard)
        return heard

    return transcribe


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulated streaming transcription")
    parser.add_argument("--duration", type=float, default=20.0, help="Recording length in seconds")
    parser.add_argument("--update", type=float, default=1.0, help="Seconds of audio per update")
    parser.add_argument("--plain", action="store_true", help="Use the plain-text strategy")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    words = scripted_words(args.duration)
    session = TranscriptionSession(
        transcribe=make_recognizer(words, args.plain),
        processor=create_processor("plain" if args.plain else "timestamp"),
        window_policy=WindowShiftPolicy(WindowConfig(sample_rate=SAMPLE_RATE, max_window_sec=8.0, shift_sec=3.0)),
        on_update=lambda u: print(f"  {u.committed[-50:]!r:55} | {u.tentative!r}"),
    )

    ramp = np.arange(int(args.duration * SAMPLE_RATE), dtype=np.float32) / SAMPLE_RATE
    step = int(args.update * SAMPLE_RATE)
    chunks = (ramp[i : i + step] for i in range(0, len(ramp), step))
    final = session.run(chunks)

    expected = " ".join(w.text for w in words)
    print(f"\nFinal transcript:\n  {final.committed}")
    print(f"Matches script: {final.committed == expected}")


if __name__ == "__main__":
    main()
