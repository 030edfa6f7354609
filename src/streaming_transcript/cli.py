"""CLI for replaying recognizer hypotheses and planning decode windows."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterator, List, Tuple

from streaming_transcript.agreement import create_processor
from streaming_transcript.audio import WindowConfig, WindowShiftPolicy


def read_hypotheses(path: Path, timestamped: bool = False) -> Iterator[Tuple[float, object]]:
    """Yield (offset, hypothesis) per JSON line.

    Line format: {"offset": 5.0, "words": [{"text": ..., "start": ..., "end": ...}]}
    or {"offset": 5.0, "text": "plain hypothesis"}. Blank lines are skipped.
    With timestamped=True, lines without words/chunks are rejected.
    """
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ValueError(f"{path}:{lineno}: invalid JSON ({exc.msg})") from exc
            if not isinstance(record, dict):
                raise ValueError(f"{path}:{lineno}: expected an object")
            offset = float(record.get("offset", 0.0))
            if "words" in record:
                yield offset, record["words"]
            elif "chunks" in record:
                yield offset, record["chunks"]
            elif timestamped:
                raise ValueError(f"{path}:{lineno}: no word timestamps (use --plain for text hypotheses)")
            else:
                yield offset, record.get("text", "")


def replay(path: Path, strategy: str, final_only: bool) -> str:
    """Feed a hypothesis log through a processor; print updates; return final transcript."""
    processor = create_processor(strategy)
    hypotheses = read_hypotheses(path, timestamped=strategy == "timestamp")
    for i, (offset, hypothesis) in enumerate(hypotheses, start=1):
        update = processor.process(hypothesis, offset)
        if not final_only:
            print(f"[{i:3d} @ {offset:7.2f}s] committed: {update.committed!r}  tentative: {update.tentative!r}")
    final = processor.finalize()
    print(final.committed)
    return final.committed


def plan_windows(path: Path, config: WindowConfig, step_sec: float) -> List[Tuple[float, float]]:
    """Simulate audio arriving in step_sec chunks and print the selected windows."""
    import numpy as np
    import scipy.io.wavfile as wavfile

    sr, audio = wavfile.read(str(path))
    if audio.ndim > 1:
        audio = audio.mean(axis=1)
    if sr != config.sample_rate:
        config = WindowConfig(
            sample_rate=sr,
            max_window_sec=config.max_window_sec,
            shift_sec=config.shift_sec,
            min_window_sec=config.min_window_sec,
        )
    policy = WindowShiftPolicy(config)
    step = max(int(step_sec * sr), 1)
    print(f"{path}: {len(audio) / sr:.2f}s at {sr} Hz")
    windows = []
    for total in np.arange(step, len(audio) + step, step):
        total = int(min(total, len(audio)))
        window = policy.plan(total)
        if window is None:
            continue
        windows.append((window.offset, window.duration))
        print(f"  audio {total / sr:7.2f}s -> window {window.offset:7.2f}s + {window.duration:5.2f}s")
    return windows


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Streaming transcript reconciliation tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_replay = sub.add_parser("replay", help="Replay a JSON-lines hypothesis log through local agreement")
    p_replay.add_argument("file", type=Path, help="JSON lines: {offset, words|text} per decode")
    p_replay.add_argument(
        "--plain",
        action="store_true",
        help="Use the plain-text strategy (no word timestamps)",
    )
    p_replay.add_argument(
        "--final-only",
        action="store_true",
        help="Only print the finalized transcript",
    )

    p_windows = sub.add_parser("windows", help="Show the decode windows selected for a WAV file")
    p_windows.add_argument("file", type=Path, help="Input WAV file")
    p_windows.add_argument("--max-window", type=float, default=15.0, help="Max window seconds (default: 15)")
    p_windows.add_argument("--shift", type=float, default=5.0, help="Window shift seconds (default: 5)")
    p_windows.add_argument("--step", type=float, default=1.0, help="Seconds of audio per update (default: 1)")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "replay":
            replay(args.file, "plain" if args.plain else "timestamp", args.final_only)
        else:
            config = WindowConfig(max_window_sec=args.max_window, shift_sec=args.shift)
            plan_windows(args.file, config, args.step)
    except (OSError, TypeError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
