"""Pick the one line worth showing as the agent's current activity.

Two passes over the cleaned window, newest line first:

1. Action lines: tool invocations (``⏺ Read(file.ts)``) and their results
   (``⎿ Read 120 lines``). A result is reported as the invocation of its
   tool block when that invocation is still visible.
2. Otherwise the most recent meaningful line, with spinner rows, token
   counters, keyboard hints, separators and bare prompts filtered out.

Whatever is returned has its leading icon removed, is cut to the maximum
length, and has passed the garbage filter, so escape remnants that survived
stripping never reach the UI.
"""

from __future__ import annotations

import re

from agent_status.parsing.ui_patterns import DEFAULT_PATTERNS, UIPatterns, matches_any

DEFAULT_MAX_LENGTH = 60
_ELLIPSIS = "..."

# How far above a result line its invocation may sit
_BLOCK_LOOKBACK = 5

_ALPHA_RE = re.compile(r"[a-zA-Z]")
_MIN_ALPHA_RATIO = 0.4
# Escape remnants that slipped through: "2026h", "25l", "[?2026", "?25", "uts", "h"
_GARBAGE_SHAPE_RES = (
    re.compile(r"^[0-9]+[a-z]$", re.IGNORECASE),
    re.compile(r"^\[?\??[0-9]+[a-z]*$", re.IGNORECASE),
    re.compile(r"^[a-z]{1,3}$", re.IGNORECASE),
)


def truncate_message(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Cut ``text`` to ``max_length`` characters, ending in an ellipsis if cut."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(_ELLIPSIS)] + _ELLIPSIS


def is_garbage_message(text: str) -> bool:
    """Check whether a candidate message looks like escape-sequence debris."""
    if not text or len(text) < 3:
        return True
    alpha = len(_ALPHA_RE.findall(text))
    if alpha / len(text) < _MIN_ALPHA_RATIO:
        return True
    return any(p.match(text) for p in _GARBAGE_SHAPE_RES)


def is_action_line(line: str, patterns: UIPatterns = DEFAULT_PATTERNS) -> bool:
    """Check whether a stripped line is a tool invocation or a tool result."""
    return _is_invocation(line, patterns) or _is_result(line, patterns)


def is_status_line(line: str, patterns: UIPatterns = DEFAULT_PATTERNS) -> bool:
    """Check whether a stripped line is UI noise rather than content."""
    return matches_any(patterns.status_noise, line)


def _is_invocation(line: str, patterns: UIPatterns) -> bool:
    return any(p.match(line) for p in patterns.action_invocation)


def _is_result(line: str, patterns: UIPatterns) -> bool:
    return matches_any(patterns.action_result, line)


def _finish(line: str, patterns: UIPatterns, max_length: int) -> str | None:
    text = patterns.leading_icons.sub("", line, count=1).strip()
    text = truncate_message(text, max_length)
    if is_garbage_message(text):
        return None
    return text


def _invocation_for(lines: list[str], index: int, patterns: UIPatterns) -> str | None:
    # Walk up through the result block; stop at a blank or unrelated line
    for j in range(index - 1, max(-1, index - 1 - _BLOCK_LOOKBACK), -1):
        line = lines[j]
        if _is_invocation(line, patterns):
            return line
        if not line or not _is_result(line, patterns):
            return None
    return None


def find_action_message(
    window: str,
    patterns: UIPatterns = DEFAULT_PATTERNS,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> str | None:
    """Return the newest tool invocation or result line, cleaned for display.

    Args:
        window: Stripped window text.
        patterns: Rule tables to use.
        max_length: Longest message returned, ellipsis included.

    Returns:
        The action text without its leading icon, or None if no usable
        action line is in the window.
    """
    lines = [line.strip() for line in window.split("\n")]
    for i in range(len(lines) - 1, -1, -1):
        line = lines[i]
        if not line:
            continue
        if _is_invocation(line, patterns):
            candidate = line
        elif _is_result(line, patterns):
            candidate = _invocation_for(lines, i, patterns) or line
        else:
            continue
        message = _finish(candidate, patterns, max_length)
        if message is not None:
            return message
    return None


def _is_meaningful(line: str, patterns: UIPatterns) -> bool:
    if len(line) < 3:
        return False
    if is_status_line(line, patterns):
        return False
    if patterns.shell_prompt.match(line):
        return False
    if patterns.glyph_only.match(line):
        return False
    return True


def find_content_message(
    window: str,
    patterns: UIPatterns = DEFAULT_PATTERNS,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> str | None:
    """Return the newest meaningful line, or None if it fails the garbage filter.

    Only the newest surviving line is considered; a garbage candidate yields
    None rather than an older line.
    """
    candidates = [line.strip() for line in window.split("\n")]
    candidates = [line for line in candidates if _is_meaningful(line, patterns)]
    if not candidates:
        return None
    return _finish(candidates[-1], patterns, max_length)


def extract_message(
    window: str,
    patterns: UIPatterns = DEFAULT_PATTERNS,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> str | None:
    """Return the action message if there is one, else the newest content line."""
    return (
        find_action_message(window, patterns, max_length)
        or find_content_message(window, patterns, max_length)
    )
