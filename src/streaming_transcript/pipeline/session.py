"""Recording session: audio -> window policy -> recognizer -> agreement -> display.

Glue that owns one stream's state. The recognizer is a callable
(transcribe) so any backend can be plugged in: it receives the float32
window samples and returns a hypothesis (word list with window-relative
times, or plain text for the plain-text strategy).

Caller contract enforced here:
- at most one decode in flight; overlapping generate() calls are dropped
- finalize() waits (bounded) for the in-flight decode before flushing
- results of decodes that finish after cancel()/start() are discarded
- recognizer errors leave the agreement state untouched
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

import numpy as np

from streaming_transcript.agreement import AgreementProcessor, TranscriptUpdate, create_processor
from streaming_transcript.audio import AudioHistory, AudioWindow, WindowShiftPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionConfig:
    """Session lifecycle parameters."""

    # How long finalize() waits for an in-flight decode
    finalize_timeout_sec: float = 10.0
    # Decode the remaining window once more before finalizing
    final_decode: bool = True

    def __post_init__(self) -> None:
        if self.finalize_timeout_sec < 0:
            raise ValueError("finalize_timeout_sec must be >= 0")


Transcribe = Callable[[np.ndarray], Any]
UpdateCallback = Callable[[TranscriptUpdate], None]


class TranscriptionSession:
    """One recording stream with its own agreement processor.

    Interface:
      session = TranscriptionSession(transcribe=my_asr_fn, on_update=render)
      session.start()
      session.push_audio(chunk)
      session.generate()          # decode current window (dropped if busy)
      final = session.finalize()  # end of stream
      session.cancel()            # discard the stream
    """

    def __init__(
        self,
        transcribe: Transcribe,
        processor: Optional[AgreementProcessor] = None,
        window_policy: Optional[WindowShiftPolicy] = None,
        config: Optional[SessionConfig] = None,
        on_update: Optional[UpdateCallback] = None,
        history: Optional[AudioHistory] = None,
    ):
        self.transcribe = transcribe
        self.processor = processor or create_processor("timestamp")
        self.window_policy = window_policy or WindowShiftPolicy()
        self.config = config or SessionConfig()
        self.on_update = on_update or (lambda update: None)
        self.history = history or AudioHistory()

        self._busy = threading.Lock()
        # Guards processor/history against start()/cancel() racing a decode
        self._state = threading.Lock()
        self._generation = 0

    @property
    def busy(self) -> bool:
        """True while a decode is in flight."""
        return self._busy.locked()

    @property
    def committed_text(self) -> str:
        return self.processor.committed_text

    def start(self) -> None:
        """Begin a new recording: clear audio and agreement state."""
        self._discard("Starting new recording")

    def cancel(self) -> None:
        """Discard the current recording; late decode results are ignored."""
        self._discard("Recording cancelled")

    def _discard(self, reason: str) -> None:
        with self._state:
            self._generation += 1
            self.processor.reset()
            self.history.clear()
        logger.info("%s (generation %d)", reason, self._generation)

    def push_audio(self, chunk: np.ndarray) -> None:
        """Append captured samples (mono, window_policy sample rate)."""
        self.history.push(chunk)

    def generate(self) -> Optional[TranscriptUpdate]:
        """Decode the current window and reconcile it.

        Returns:
            The update, or None when a decode is already in flight, there is
            not enough audio, or the stream was reset while decoding.
        """
        if not self._busy.acquire(blocking=False):
            logger.debug("Decode in flight; dropping generate request")
            return None
        generation = self._generation
        try:
            update = self._decode_current_window(generation)
        finally:
            self._busy.release()
        if update is None or generation != self._generation:
            return None
        self.on_update(update)
        return update

    def _decode_current_window(self, generation: int) -> Optional[TranscriptUpdate]:
        selected = self.window_policy.select(self.history)
        if selected is None:
            return None
        window, audio = selected
        return self._decode(window, audio, generation)

    def _decode(self, window: AudioWindow, audio: np.ndarray, generation: int) -> Optional[TranscriptUpdate]:
        failed = False
        try:
            hypothesis = self.transcribe(audio)
        except Exception:
            logger.exception("Transcription failed for window at %.2fs", window.offset)
            hypothesis, failed = None, True

        with self._state:
            if generation != self._generation:
                logger.debug("Discarding decode result from generation %d", generation)
                return None
            # Audio before the window start can no longer be re-decoded
            self.history.trim_before(window.start_sample)
            if failed:
                return TranscriptUpdate(self.processor.committed_text, "")
            update = self.processor.process(hypothesis, window.offset)
            self.processor.pop_committed(window.offset)
            return update

    def finalize(self, final_decode: Optional[bool] = None) -> TranscriptUpdate:
        """Flush the stream: all tentative text becomes committed.

        Waits up to finalize_timeout_sec for an in-flight decode; on timeout
        the current state is finalized and the late result is discarded.

        Args:
            final_decode: Decode the remaining window once before flushing
                (defaults to config.final_decode).
        """
        if final_decode is None:
            final_decode = self.config.final_decode

        acquired = self._busy.acquire(timeout=self.config.finalize_timeout_sec)
        if not acquired:
            logger.warning(
                "Decode still in flight after %.1fs; finalizing current transcript",
                self.config.finalize_timeout_sec,
            )
            with self._state:
                self._generation += 1
        try:
            if acquired and final_decode:
                self._decode_current_window(self._generation)
            with self._state:
                update = self.processor.finalize()
        finally:
            if acquired:
                self._busy.release()

        logger.info("Session finalized: %d committed words", len(self.processor.all_committed_words))
        self.on_update(update)
        return update

    def run(self, audio_iterator: Iterable[np.ndarray]) -> TranscriptUpdate:
        """Push each chunk and decode after it, then finalize.

        Convenience for offline replay and tests: decodes run sequentially on
        the caller's thread.
        """
        self.start()
        for chunk in audio_iterator:
            chunk = np.asarray(chunk, dtype=np.float32)
            if chunk.size == 0:
                continue
            self.push_audio(chunk)
            self.generate()
        return self.finalize()
