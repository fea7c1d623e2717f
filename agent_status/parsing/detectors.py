from __future__ import annotations

import logging

from agent_status.log_setup import TRACE
from agent_status.parsing.models import ParserState
from agent_status.parsing.ui_patterns import DEFAULT_PATTERNS, UIPatterns, matches_any

logger = logging.getLogger(__name__)

# How far up from the bottom waiting prompts are looked for
PENDING_TAIL_LINES = 10
# How many trailing non-empty lines may hold the idle prompt
IDLE_PROMPT_LINES = 3


# --- Agent presence ---


class AgentPresenceDetector:
    """One-way latch telling agent output apart from a bare shell.

    The latch lives on the bound :class:`ParserState` (``agent_detected``) and
    only ever goes from False to True. A quiet stretch after real agent output
    must not make the session look like a plain shell again; only a fresh
    ParserState (``reset()``) clears it.
    """

    def __init__(self, state: ParserState, patterns: UIPatterns = DEFAULT_PATTERNS) -> None:
        self._state = state
        self._patterns = patterns

    def check(self, clean_text: str) -> bool:
        """Scan ``clean_text`` for agent markers and latch on the first hit.

        Args:
            clean_text: Stripped buffer text.

        Returns:
            True once any marker has ever been seen for this state.
        """
        if self._state.agent_detected:
            return True
        for pattern in self._patterns.agent_markers:
            if pattern.search(clean_text):
                self._state.agent_detected = True
                logger.debug("Agent detected (marker %r)", pattern.pattern)
                return True
        return False


# --- Line helpers ---


def is_working_line(line: str, patterns: UIPatterns = DEFAULT_PATTERNS) -> bool:
    """Check whether a single stripped line shows the agent busy."""
    if patterns.spinner.search(line):
        return True
    return any(p.match(line) for p in patterns.working_line)


def pending_tail(lines: list[str], patterns: UIPatterns = DEFAULT_PATTERNS) -> list[str]:
    """Return the trailing lines that may still hold an unanswered prompt.

    Walks up from the bottom collecting non-empty stripped lines and stops at
    the first working-indicator line: anything above it was followed by new
    activity, so a menu up there has already been answered.

    Args:
        lines: Window lines, oldest first.
        patterns: Rule tables to use.

    Returns:
        Up to ``PENDING_TAIL_LINES`` stripped lines, oldest first.
    """
    tail: list[str] = []
    for line in reversed(lines):
        stripped = line.strip()
        if not stripped:
            continue
        if is_working_line(stripped, patterns):
            break
        tail.append(stripped)
        if len(tail) >= PENDING_TAIL_LINES:
            break
    tail.reverse()
    return tail


# --- Rule detectors ---


def detect_menu_context(tail: list[str], patterns: UIPatterns = DEFAULT_PATTERNS) -> bool:
    """Detect a numbered Yes/No menu, a "Do you want to" phrase or a [Y/n] prompt.

    The prompt glyph doubles as the menu cursor ("❯ 1. Yes"), so while this
    is true a bare prompt line must not be read as idle.
    """
    return matches_any(patterns.menu_context, "\n".join(tail))


def detect_tool_approval(tail: list[str], patterns: UIPatterns = DEFAULT_PATTERNS) -> bool:
    """Detect the agent asking permission to run, edit or fetch something."""
    return matches_any(patterns.tool_approval, "\n".join(tail))


def detect_question(tail: list[str], patterns: UIPatterns = DEFAULT_PATTERNS) -> bool:
    """Detect an open-ended question or a chooser that is not a Yes/No approval."""
    return matches_any(patterns.question, "\n".join(tail))


def detect_idle_prompt(lines: list[str], patterns: UIPatterns = DEFAULT_PATTERNS) -> bool:
    """Detect the standalone prompt glyph among the last few non-empty lines.

    Separators and keyboard hints drawn around the input box are skipped;
    any other content line longer than two characters ends the search.

    Args:
        lines: Window lines, oldest first.
        patterns: Rule tables to use.

    Returns:
        True if a line consisting only of the prompt glyph was found.
    """
    non_empty = [line.strip() for line in lines if line.strip()]
    for line in reversed(non_empty[-IDLE_PROMPT_LINES:]):
        if patterns.idle_prompt.match(line):
            return True
        if patterns.separator.match(line) or matches_any(patterns.keyboard_hint, line):
            continue
        if len(line) > 2:
            break
    return False


def detect_working(window: str, patterns: UIPatterns = DEFAULT_PATTERNS) -> bool:
    """Detect active work anywhere in the window.

    Spinner frames and progress phrases count wherever they appear. Status
    icons only count at the start of a line, since the same glyphs also show
    up as decoration inside ordinary output.
    """
    if patterns.spinner.search(window):
        logger.log(TRACE, "detect_working: spinner")
        return True
    if matches_any(patterns.progress, window):
        logger.log(TRACE, "detect_working: progress phrase")
        return True
    for line in window.split("\n"):
        stripped = line.strip()
        if any(p.match(stripped) for p in patterns.working_line):
            logger.log(TRACE, "detect_working: status line %r", stripped[:40])
            return True
    return False
