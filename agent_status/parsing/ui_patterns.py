"""Declarative pattern tables for the agent's terminal UI.

Every rule the detectors and the classifier apply lives here as data: ordered
tuples of compiled regexes. Patterns that mention a glyph are built from a
:class:`~agent_status.parsing.models.GlyphSet`, so a change in the agent's
rendering is a configuration change rather than a code change.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from agent_status.parsing.models import GlyphSet

# --- Glyph-independent patterns ---

# Numbered Yes/No rows of a selection menu ("❯ 1. Yes", "  2. No, exit")
_MENU_YES_NO_RE = re.compile(r"\d+\.\s*(?:Yes|No)\b", re.IGNORECASE)
_DO_YOU_WANT_RE = re.compile(r"Do you want to", re.IGNORECASE)
# [Y/n] and [y/N] in any case
_CONFIRM_RE = re.compile(r"\[Y/N\]", re.IGNORECASE)

_TOOL_APPROVAL_RES = (
    re.compile(
        r"Do you want to (?:proceed|make this edit|create|edit|run|allow"
        r"|delete|overwrite|write|execute|fetch)",
        re.IGNORECASE,
    ),
    re.compile(r"\bAllow\s+\S+.*\?", re.IGNORECASE),
    re.compile(r"needs? (?:your )?permission", re.IGNORECASE),
    re.compile(r"request(?:s|ing)? (?:your )?(?:approval|permission)", re.IGNORECASE),
    re.compile(r"Yes, and don't ask again", re.IGNORECASE),
    re.compile(r"Yes, allow", re.IGNORECASE),
)

_QUESTION_RES = (
    # Chooser UI of the agent's ask-the-user tool
    re.compile(r"Enter to select", re.IGNORECASE),
    re.compile(r"↑/↓ to navigate"),
    re.compile(r"Type something", re.IGNORECASE),
    # Clarifying questions in prose
    re.compile(r"Would you like (?:me )?to\b", re.IGNORECASE),
    re.compile(r"What would you like", re.IGNORECASE),
    re.compile(r"Which (?:one|option|approach|of these)\b.*\?", re.IGNORECASE),
    re.compile(r"Please (?:choose|select|pick|specify|clarify)\b", re.IGNORECASE),
    re.compile(r"Could you (?:clarify|confirm|provide|share|tell me)\b", re.IGNORECASE),
    re.compile(r"Should I (?:proceed|continue|go ahead)\b", re.IGNORECASE),
)

_PROGRESS_RES = (
    re.compile(r"Vibing…", re.IGNORECASE),
    re.compile(r"Thinking…", re.IGNORECASE),
    re.compile(r"thinking\)", re.IGNORECASE),
    re.compile(r"thought for \d+", re.IGNORECASE),
    re.compile(r"Reading\s+\S+", re.IGNORECASE),
    re.compile(r"Writing\s+\S+", re.IGNORECASE),
    re.compile(r"Editing\s+\S+", re.IGNORECASE),
    re.compile(r"Searching", re.IGNORECASE),
    re.compile(r"Analyzing", re.IGNORECASE),
    re.compile(r"Processing", re.IGNORECASE),
    re.compile(r"Executing", re.IGNORECASE),
    re.compile(r"Running", re.IGNORECASE),
    re.compile(r"tokens\s*·", re.IGNORECASE),
    # Streaming token counter ("↓ 5.2k tokens")
    re.compile(r"↓\s*[\d.]+k?\s*tokens", re.IGNORECASE),
    # Sub-agent activity
    re.compile(r"Burrowing", re.IGNORECASE),
    re.compile(r"Launching", re.IGNORECASE),
    re.compile(r"Task\s*\([^)]+\)", re.IGNORECASE),
)

_KEYBOARD_HINT_RES = (
    re.compile(r"ctrl\+[a-z](?:\s+to|\s*$)", re.IGNORECASE),
    re.compile(r"^\s*esc\s+to", re.IGNORECASE),
    re.compile(r"^\s*tab\s+to", re.IGNORECASE),
    re.compile(r"^\s*\?\s+for shortcuts", re.IGNORECASE),
    re.compile(r"shift\+tab to cycle", re.IGNORECASE),
)

_SEPARATOR_RE = re.compile(r"^\s*[─━═]+\s*$")
_SHELL_PROMPT_RE = re.compile(r"^[$%>#]\s*$")

_NOISE_RES = (
    re.compile(r"^\s*Vibing…", re.IGNORECASE),
    re.compile(r"^\s*Thinking…", re.IGNORECASE),
    re.compile(r"^\s*Burrowing", re.IGNORECASE),
    re.compile(r"^\s*Bloviating", re.IGNORECASE),
    # Elapsed time ("2m 6s ·")
    re.compile(r"^\d+[ms]\s*·"),
    re.compile(r"^↓\s*[\d.]+k?\s*tokens", re.IGNORECASE),
    re.compile(r"^\s*\.\.\.\s*$"),
    *_KEYBOARD_HINT_RES,
    # Collapsed output ("+20 lines", "+63 more tool uses")
    re.compile(r"^\s*\+\d+\s+lines", re.IGNORECASE),
    re.compile(r"^\s*\+\d+\s+more\s+tool", re.IGNORECASE),
    # Extra status line ("2 files +0 -0")
    re.compile(r"^\s*\d+\s+files?\s+[+-]\d+\s+[+-]\d+", re.IGNORECASE),
    _SEPARATOR_RE,
    re.compile(r"^\s*\d+\.\s*(?:Yes|No)\s*$", re.IGNORECASE),
    re.compile(r"MCP server", re.IGNORECASE),
    re.compile(r"needs auth", re.IGNORECASE),
    re.compile(r"Waiting…", re.IGNORECASE),
    re.compile(r"Running\s+\w+\s+hook", re.IGNORECASE),
)

_TOOL_NAMES = (
    "Write|Read|Edit|Update|MultiEdit|Bash|Glob|Grep|Task"
    "|WebFetch|WebSearch|NotebookEdit|TodoWrite"
)
_RESULT_VERBS = "Wrote|Read|Edited|Updated|Ran|Found|Added|Listed"
_ONGOING_VERBS = "Reading|Writing|Editing|Running|Executing|Searching"

# Result summaries that carry no marker of their own
_LOOSE_RESULT_RES = (
    re.compile(r"Wrote\s+\d+\s+lines", re.IGNORECASE),
    re.compile(r"Read\s+\d+\s+lines", re.IGNORECASE),
    re.compile(r"Found\s+\d+\s+(?:files?|matches?)", re.IGNORECASE),
    re.compile(r"Added \d+ lines?, removed \d+ lines?", re.IGNORECASE),
)


def char_class(chars: str) -> str:
    """Build a regex character class matching any one of ``chars``."""
    return "[" + "".join(re.escape(c) for c in chars) + "]"


@dataclass(frozen=True)
class UIPatterns:
    """All rule tables, compiled against one glyph set."""

    glyphs: GlyphSet
    agent_markers: tuple[re.Pattern, ...]
    menu_context: tuple[re.Pattern, ...]
    tool_approval: tuple[re.Pattern, ...]
    question: tuple[re.Pattern, ...]
    progress: tuple[re.Pattern, ...]
    working_line: tuple[re.Pattern, ...]
    spinner: re.Pattern
    idle_prompt: re.Pattern
    separator: re.Pattern
    keyboard_hint: tuple[re.Pattern, ...]
    status_noise: tuple[re.Pattern, ...]
    action_invocation: tuple[re.Pattern, ...]
    action_result: tuple[re.Pattern, ...]
    leading_icons: re.Pattern
    glyph_only: re.Pattern
    shell_prompt: re.Pattern


def build_patterns(glyphs: GlyphSet) -> UIPatterns:
    """Compile the rule tables for the given glyph set.

    Args:
        glyphs: The glyphs the agent currently renders.

    Returns:
        A frozen :class:`UIPatterns` holding every table the pipeline uses.
    """
    spinner = char_class(glyphs.spinner_frames)
    stars = char_class(glyphs.activity_icons)
    tool = re.escape(glyphs.tool_marker)
    result = re.escape(glyphs.result_marker)
    prompt = re.escape(glyphs.prompt)
    status_icons = char_class(glyphs.status_icons)
    leading = char_class(glyphs.leading_icons)

    agent_markers = tuple(
        re.compile(re.escape(name), re.IGNORECASE) for name in glyphs.agent_names
    ) + (
        re.compile(status_icons),
        re.compile(spinner),
    )

    working_line = (
        # Activity star followed by any status text
        re.compile(rf"^{stars}\s+\S"),
        re.compile(rf"^{tool}\s*(?:{_TOOL_NAMES})", re.IGNORECASE),
        re.compile(rf"^{result}\s*(?:{_ONGOING_VERBS})", re.IGNORECASE),
    )

    status_noise = (
        re.compile(rf"^{status_icons}\s*(?:Vibing|Thinking|Working|Burrowing)", re.IGNORECASE),
        re.compile(rf"^\s*{spinner}+\s*$"),
        re.compile(rf"^\s*{prompt}\s*$"),
        # Menu selector row ("❯ 1. Yes")
        re.compile(rf"^\s*{prompt}\s+\d+\."),
        *_NOISE_RES,
    )

    action_invocation = (
        re.compile(rf"^(?:{stars}|{tool})\s*(?:{_TOOL_NAMES})\s*\(", re.IGNORECASE),
    )
    action_result = (
        re.compile(rf"^{result}\s*(?:{_RESULT_VERBS})\b", re.IGNORECASE),
        *_LOOSE_RESULT_RES,
    )

    return UIPatterns(
        glyphs=glyphs,
        agent_markers=agent_markers,
        menu_context=(_MENU_YES_NO_RE, _DO_YOU_WANT_RE, _CONFIRM_RE),
        tool_approval=_TOOL_APPROVAL_RES,
        question=_QUESTION_RES,
        progress=(
            re.compile(rf"{stars}\s*(?:Vibing|Thinking|Working)", re.IGNORECASE),
            *_PROGRESS_RES,
        ),
        working_line=working_line,
        spinner=re.compile(spinner),
        idle_prompt=re.compile(rf"^{prompt}\s*$"),
        separator=_SEPARATOR_RE,
        keyboard_hint=_KEYBOARD_HINT_RES,
        status_noise=status_noise,
        action_invocation=action_invocation,
        action_result=action_result,
        leading_icons=re.compile(rf"^{leading}\s*"),
        glyph_only=re.compile(rf"^(?:{spinner}|{leading}|\s)+$"),
        shell_prompt=_SHELL_PROMPT_RE,
    )


DEFAULT_PATTERNS = build_patterns(GlyphSet())


def matches_any(patterns: tuple[re.Pattern, ...], text: str) -> bool:
    """Return True if any pattern in the table finds a match in ``text``."""
    return any(p.search(text) for p in patterns)
