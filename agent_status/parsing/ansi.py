from __future__ import annotations

import re

# Cursor forward: ESC[NC becomes N spaces (the agent uses ESC[1C between words)
_CURSOR_FORWARD_RE = re.compile(r"\x1b\[(\d*)C")
# Right-aligned status bars jump hundreds of columns; a few spaces keep words apart
_MAX_CURSOR_FORWARD = 8

_CONTROL_SEQUENCE_RE = re.compile(
    r"\x1b\[[0-9;?>=!]*[A-Za-z~]"           # CSI: ESC [ ... final byte
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)?"   # OSC: ESC ] ... BEL or ST (titles, hyperlinks)
    r"|\x1b[PX^_][^\x1b]*(?:\x1b\\)?"        # DCS / SOS / PM / APC ... ST
    r"|\x1b[NO][^\x1b]?"                     # SS2 / SS3
    r"|\x1b[\[\]()#][0-9;?]*[A-Za-z]?"       # charset selection and unterminated CSI
    r"|\x1b[A-Za-z=>78<]"                    # two-character ESC sequences
    r"|\x07|\x1b"                            # lone BEL / ESC
)

# Fragments of sequences whose ESC was cut off at a chunk or buffer boundary:
# "[?2026h", "?2026", "[38;5;246m", "38;5;246m", "25l"
_REMNANT_RE = re.compile(
    r"\[?\?\d+[hlmnsu]?"
    r"|\[\d+[hlmnsu]"
    r"|\[?\d+(?:;\d+)+[A-Za-z]"
    r"|\d+[A-Za-z](?=[^a-zA-Z]|$)"
)

# C0 controls other than \t, \n, \r, plus DEL
_CONTROL_CHAR_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _strip_once(text: str) -> str:
    text = _CONTROL_SEQUENCE_RE.sub("", text)
    text = _REMNANT_RE.sub("", text)
    text = _CONTROL_CHAR_RE.sub("", text)
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _cursor_forward_spaces(match: re.Match) -> str:
    digits = match.group(1)
    # Three or more digits always exceed the clamp
    if len(digits) > 2:
        return " " * _MAX_CURSOR_FORWARD
    return " " * min(max(int(digits or 1), 1), _MAX_CURSOR_FORWARD)


def strip_control_sequences(text: str) -> str:
    """Remove terminal control sequences and their truncated remnants.

    Cursor-forward moves become spaces, at most eight, so words stay
    separated without flooding the window. Every other sequence is
    deleted. Passes repeat until nothing changes, because removing
    one sequence can expose a remnant of another, which makes the function
    idempotent: ``strip_control_sequences(strip_control_sequences(x))`` equals
    ``strip_control_sequences(x)``.

    Must be given the accumulated buffer rather than a lone chunk, since a
    sequence may straddle two chunks.

    Args:
        text: Raw terminal output, possibly cut mid-sequence at either end.

    Returns:
        Plain text with ``\\n`` line endings.
    """
    text = _CURSOR_FORWARD_RE.sub(_cursor_forward_spaces, text)
    while True:
        cleaned = _strip_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned
