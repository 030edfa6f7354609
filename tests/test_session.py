"""Unit tests and toy example for the transcription session."""

from __future__ import annotations

import threading
import unittest
from typing import List

import numpy as np

from streaming_transcript.agreement import HypothesisBuffer, TranscriptUpdate, Word, create_processor
from streaming_transcript.audio import WindowConfig, WindowShiftPolicy
from streaming_transcript.pipeline import SessionConfig, TranscriptionSession

# Low sample rate keeps the synthetic audio small
SR = 100
WINDOW = WindowConfig(sample_rate=SR, max_window_sec=4.0, shift_sec=2.0)

# Spoken words: w0 at 0.0-0.4 s, w1 at 0.5-0.9 s, ...
TRUTH = [Word(f"w{i}", i * 0.5, i * 0.5 + 0.4) for i in range(20)]


def _ramp_chunks(duration_sec: float, chunk_sec: float = 0.5) -> List[np.ndarray]:
    """Audio whose sample values are their absolute time in seconds."""
    total = int(duration_sec * SR)
    step = int(chunk_sec * SR)
    ramp = np.arange(total, dtype=np.float32) / SR
    return [ramp[i : i + step] for i in range(0, total, step)]


def fake_transcribe(audio: np.ndarray) -> List[Word]:
    """Recognizer stand-in: words fully inside the window, window-relative times."""
    start = float(audio[0])
    end = start + len(audio) / SR
    return [
        Word(w.text, w.start - start, w.end - start)
        for w in TRUTH
        if w.start >= start - 1e-6 and w.end <= end + 1e-6
    ]


def make_session(transcribe=fake_transcribe, **kwargs) -> TranscriptionSession:
    return TranscriptionSession(
        transcribe=transcribe,
        window_policy=WindowShiftPolicy(WINDOW),
        **kwargs,
    )


class TestTranscriptionSession(unittest.TestCase):
    """Tests for TranscriptionSession."""

    def test_run_reconstructs_transcript_across_window_shifts(self) -> None:
        """Sliding windows with re-decoded overlap yield each word exactly once."""
        updates: List[TranscriptUpdate] = []
        session = make_session(on_update=updates.append)
        final = session.run(_ramp_chunks(10.0))
        self.assertEqual(final.committed, " ".join(w.text for w in TRUTH))
        self.assertEqual(final.tentative, "")
        self.assertGreater(len(updates), 10)
        # Committed text only ever grows
        for before, after in zip(updates, updates[1:]):
            self.assertTrue(after.committed.startswith(before.committed))

    def test_history_and_lookback_trimmed_to_window(self) -> None:
        session = make_session()
        session.start()
        for chunk in _ramp_chunks(9.0):
            session.push_audio(chunk)
            session.generate()
        self.assertEqual(session.history.start_sample, 6 * SR)
        tail = session.processor.committed_tail
        self.assertTrue(all(w.end > 6.0 for w in tail))
        self.assertIn("w0", session.committed_text)

    def test_not_enough_audio(self) -> None:
        calls = []
        session = make_session(transcribe=lambda audio: calls.append(audio) or [])
        session.push_audio(np.zeros(10, dtype=np.float32))
        self.assertIsNone(session.generate())
        self.assertEqual(calls, [])

    def test_generate_dropped_while_busy(self) -> None:
        """A generate request during an in-flight decode is dropped."""
        inner: List[object] = []

        def transcribe(audio: np.ndarray) -> List[Word]:
            inner.append(session.generate())
            self.assertTrue(session.busy)
            return fake_transcribe(audio)

        session = make_session(transcribe=transcribe)
        session.push_audio(_ramp_chunks(1.0, chunk_sec=1.0)[0])
        update = session.generate()
        self.assertEqual(inner, [None])
        self.assertEqual(update.tentative, "w0 w1")
        self.assertFalse(session.busy)

    def test_recognizer_failure_keeps_state(self) -> None:
        """A failed decode publishes the committed text and changes nothing."""
        calls = {"n": 0}

        def flaky(audio: np.ndarray) -> List[Word]:
            calls["n"] += 1
            if calls["n"] == 3:
                raise RuntimeError("model crashed")
            return fake_transcribe(audio)

        updates: List[TranscriptUpdate] = []
        session = make_session(transcribe=flaky, on_update=updates.append)
        chunks = _ramp_chunks(3.0)
        session.push_audio(chunks[0])
        session.generate()
        session.push_audio(chunks[1])
        session.generate()
        committed = session.committed_text
        tentative = session.processor.tentative_text
        self.assertEqual((committed, tentative), ("w0", "w1"))

        with self.assertLogs("streaming_transcript.pipeline.session", level="ERROR"):
            update = session.generate()
        self.assertEqual(update, TranscriptUpdate(committed, ""))
        self.assertEqual(updates[-1], update)
        self.assertEqual(session.processor.tentative_text, tentative)
        self.assertFalse(session.busy)

    def test_cancel_during_decode_discards_result(self) -> None:
        def transcribe(audio: np.ndarray) -> List[Word]:
            session.cancel()
            return fake_transcribe(audio)

        session = make_session(transcribe=transcribe)
        session.push_audio(_ramp_chunks(1.0, chunk_sec=1.0)[0])
        self.assertIsNone(session.generate())
        self.assertEqual(session.processor.tentative_text, "")
        self.assertEqual(session.history.total_samples, 0)

    def test_cancel_while_reconciling_leaves_clean_state(self) -> None:
        """cancel() racing process()/trim waits for them, then wipes their result."""
        entered = threading.Event()
        release = threading.Event()
        cancelling = threading.Event()

        class GatedBuffer(HypothesisBuffer):
            def process(self, hypothesis, window_offset=0.0):
                entered.set()
                release.wait(5.0)
                return super().process(hypothesis, window_offset)

        session = make_session(processor=GatedBuffer())
        session.push_audio(_ramp_chunks(1.0, chunk_sec=1.0)[0])
        fresh = np.zeros(30, dtype=np.float32)

        def cancel_and_restart() -> None:
            cancelling.set()
            session.cancel()
            session.push_audio(fresh)

        decoder = threading.Thread(target=session.generate)
        canceller = threading.Thread(target=cancel_and_restart)
        decoder.start()
        self.assertTrue(entered.wait(5.0))
        canceller.start()
        self.assertTrue(cancelling.wait(5.0))
        threading.Timer(0.05, release.set).start()
        decoder.join(5.0)
        canceller.join(5.0)

        self.assertEqual(session.processor.tentative_text, "")
        self.assertEqual(session.committed_text, "")
        self.assertEqual(session.history.start_sample, 0)
        self.assertEqual(session.history.total_samples, len(fresh))

    def test_failed_decodes_still_trim_history(self) -> None:
        def broken(audio: np.ndarray) -> List[Word]:
            raise RuntimeError("model crashed")

        session = make_session(transcribe=broken)
        with self.assertLogs("streaming_transcript.pipeline.session", level="ERROR"):
            for chunk in _ramp_chunks(9.0):
                session.push_audio(chunk)
                session.generate()
        self.assertEqual(session.history.start_sample, 6 * SR)
        self.assertEqual(session.history.total_samples, 9 * SR)
        self.assertEqual(session.committed_text, "")

    def test_start_resets_previous_recording(self) -> None:
        session = make_session()
        session.run(_ramp_chunks(2.0))
        self.assertNotEqual(session.committed_text, "")
        session.start()
        self.assertEqual(session.committed_text, "")
        self.assertEqual(session.history.total_samples, 0)

    def test_finalize_without_final_decode(self) -> None:
        session = make_session(config=SessionConfig(final_decode=False))
        session.push_audio(_ramp_chunks(1.0, chunk_sec=1.0)[0])
        session.generate()
        final = session.finalize()
        self.assertEqual(final.committed, "w0 w1")
        self.assertEqual(session.finalize().committed, "w0 w1")

    def test_finalize_waits_for_in_flight_decode(self) -> None:
        entered = threading.Event()
        release = threading.Event()

        def slow(audio: np.ndarray) -> List[Word]:
            entered.set()
            release.wait(5.0)
            return fake_transcribe(audio)

        session = make_session(transcribe=slow, config=SessionConfig(finalize_timeout_sec=5.0, final_decode=False))
        session.push_audio(_ramp_chunks(1.0, chunk_sec=1.0)[0])
        worker = threading.Thread(target=session.generate)
        worker.start()
        self.assertTrue(entered.wait(5.0))
        threading.Timer(0.05, release.set).start()

        final = session.finalize()
        worker.join(5.0)
        self.assertEqual(final.committed, "w0 w1")

    def test_finalize_timeout_proceeds_and_discards_late_result(self) -> None:
        entered = threading.Event()
        release = threading.Event()

        def stuck(audio: np.ndarray) -> List[Word]:
            entered.set()
            release.wait(5.0)
            return fake_transcribe(audio)

        session = make_session(transcribe=stuck, config=SessionConfig(finalize_timeout_sec=0.05))
        session.push_audio(_ramp_chunks(1.0, chunk_sec=1.0)[0])
        worker = threading.Thread(target=session.generate)
        worker.start()
        self.assertTrue(entered.wait(5.0))

        with self.assertLogs("streaming_transcript.pipeline.session", level="WARNING"):
            final = session.finalize()
        self.assertEqual(final.committed, "")

        release.set()
        worker.join(5.0)
        self.assertEqual(session.processor.tentative_text, "")
        self.assertEqual(session.committed_text, "")

    def test_plain_text_strategy(self) -> None:
        """Session drives the plain-text strategy with a text-only recognizer."""

        def text_only(audio: np.ndarray) -> str:
            return " ".join(w.text for w in fake_transcribe(audio))

        session = make_session(transcribe=text_only, processor=create_processor("plain"))
        final = session.run(_ramp_chunks(3.0))
        self.assertEqual(final.committed, " ".join(w.text for w in TRUTH[:6]))

    def test_invalid_config(self) -> None:
        with self.assertRaises(ValueError):
            SessionConfig(finalize_timeout_sec=-1)


def run_toy_example() -> None:
    """Replay 6 s of synthetic audio through a session and print updates."""
    print("=== Toy example: transcription session ===\n")
    session = make_session(on_update=lambda u: print(f"  committed: {u.committed!r:40} tentative: {u.tentative!r}"))
    final = session.run(_ramp_chunks(6.0))
    print(f"\nFinal: {final.committed!r}")
    print("Done.")


if __name__ == "__main__":
    run_toy_example()
    print("\n--- Running unit tests ---")
    unittest.main(argv=[""], exit=False, verbosity=2)
