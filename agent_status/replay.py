"""Replay a captured agent transcript through the status parser.

Feeds the transcript in fixed-size chunks, as a PTY would deliver it, prints
every change of the merged status, then simulates one idle timeout. Useful
for checking classifier changes against real captures before shipping them.

Usage:
    python run.py TRANSCRIPT [--config FILE] [--chunk-size N] [--screen]
                  [--debug] [--trace] [--verbose]
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from agent_status.config import AppConfig, ConfigError, load_config
from agent_status.log_setup import setup_logging
from agent_status.output_parser import AgentOutputParser
from agent_status.parsing.ansi import strip_control_sequences
from agent_status.parsing.terminal_emulator import TerminalEmulator
from agent_status.session_status import SessionStatus

logger = logging.getLogger(__name__)

IDLE_TIMEOUT_LABEL = "idle-timeout"


@dataclass
class Transition:
    """A change of the merged status observed during replay."""

    label: str
    status: str
    waiting_kind: str
    message: str | None


def load_transcript(path: str) -> str:
    """Read a raw capture, decoding invalid UTF-8 the way a terminal would."""
    return Path(path).read_bytes().decode("utf-8", errors="replace")


def iter_chunks(text: str, size: int) -> Iterator[str]:
    """Yield ``text`` in pieces of ``size`` characters (the whole text if size <= 0)."""
    if size <= 0:
        yield text
        return
    for start in range(0, len(text), size):
        yield text[start : start + size]


def replay(
    text: str,
    parser: AgentOutputParser,
    chunk_size: int = 64,
    simulate_idle: bool = True,
) -> list[Transition]:
    """Run a transcript through ``parser`` and collect status changes.

    Args:
        text: The full transcript.
        parser: A fresh parser; its state is left as the replay ends.
        chunk_size: Characters per simulated PTY read.
        simulate_idle: Call ``check_idle()`` once after the last chunk, as
            the caller's timer would after a quiet period.

    Returns:
        One Transition per change of the merged status, in order.
    """
    view = SessionStatus()
    transitions: list[Transition] = []

    def _record(label: str) -> None:
        transitions.append(Transition(
            label=label,
            status=view.status.value,
            waiting_kind=view.waiting_kind.value,
            message=view.message,
        ))

    for index, chunk in enumerate(iter_chunks(text, chunk_size)):
        if view.merge(parser.process_data(chunk)):
            _record(f"chunk {index}")

    if simulate_idle:
        result = parser.check_idle()
        if result is not None and view.merge(result):
            _record(IDLE_TIMEOUT_LABEL)

    return transitions


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Replay an agent transcript through the status parser")
    parser.add_argument("transcript", help="Raw PTY capture to replay")
    parser.add_argument("--config", default=None,
                        help="Path to YAML config file (default: built-in defaults)")
    parser.add_argument("--chunk-size", type=int, default=64,
                        help="Characters per simulated read; 0 feeds everything at once (default: 64)")
    parser.add_argument("--screen", action="store_true",
                        help="Also print the emulated final screen and the stripped window")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug mode (verbose logging)")
    parser.add_argument("--trace", action="store_true",
                        help="Enable trace mode (writes trace file to debug/)")
    parser.add_argument("--verbose", action="store_true",
                        help="With --trace, also send trace output to terminal")
    return parser.parse_args(argv)


def _print_screen(text: str, parser: AgentOutputParser) -> None:
    emulator = TerminalEmulator()
    emulator.feed(text)
    print("\n" + "=" * 70)
    print("Emulated screen:")
    print("-" * 70)
    print(emulator.get_text())
    print("=" * 70)
    print("Stripped window:")
    print("-" * 70)
    window = strip_control_sequences(parser.get_buffer())[-parser.config.window_size:]
    print(window)


def main(argv: list[str] | None = None) -> int:
    """Entry point of the replay tool. Returns the process exit code."""
    args = _parse_args(argv)

    try:
        config = load_config(args.config) if args.config else AppConfig()
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    # CLI flags override config
    if args.debug:
        config.debug.enabled = True
    if args.trace:
        config.debug.trace = True
    if args.verbose:
        config.debug.verbose = True
    setup_logging(
        debug=config.debug.enabled,
        trace=config.debug.trace,
        verbose=config.debug.verbose,
    )

    path = Path(args.transcript)
    if not path.exists():
        print(f"ERROR: {path} not found", file=sys.stderr)
        return 1

    text = load_transcript(str(path))
    parser = AgentOutputParser(config.parser, config.glyphs)
    logger.debug("Replaying %s (%d chars, chunk_size=%d)", path, len(text), args.chunk_size)
    transitions = replay(text, parser, chunk_size=args.chunk_size)

    print(f"Replaying: {path}")
    print("=" * 70)
    print(f"{'Step':<14} {'Status':<9} {'Waiting':<14} {'Message'}")
    print("-" * 70)
    for t in transitions:
        print(f"  {t.label:<12} {t.status:<9} {t.waiting_kind:<14} {t.message or ''}")

    counts: Counter = Counter(t.status for t in transitions)
    print("\n" + "=" * 70)
    print("Status distribution:")
    for status, count in counts.most_common():
        print(f"  {status:<10} {count:>3}")
    print(f"\nAgent detected: {parser.has_detected_agent()}")
    print(f"Final status: {parser.state.last_status.value}")

    if args.screen:
        _print_screen(text, parser)
    return 0


if __name__ == "__main__":
    sys.exit(main())
