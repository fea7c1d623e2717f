"""Shared data types for the agent output parsing pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class AgentStatus(Enum):
    """What the agent is doing, as inferred from its terminal output."""

    IDLE = "idle"
    WORKING = "working"
    WAITING = "waiting"


class WaitingKind(Enum):
    """What kind of input a waiting agent expects. NONE unless WAITING."""

    TOOL_APPROVAL = "tool-approval"
    QUESTION = "question"
    NONE = "none"


@dataclass
class ParseResult:
    """Outcome of one parser call.

    ``None`` for ``status`` or ``message`` means "no change from the last
    known value"; callers keep what they had instead of treating it as a state.
    """

    status: AgentStatus | None = None
    message: str | None = None
    waiting_kind: WaitingKind = WaitingKind.NONE


@dataclass
class ParserState:
    """Per-session parser memory. Owned by exactly one AgentOutputParser."""

    buffer: str = ""
    last_status: AgentStatus = AgentStatus.IDLE
    last_message: str | None = None
    last_action_message: str | None = None
    agent_detected: bool = False


@dataclass(frozen=True)
class GlyphSet:
    """Unicode glyphs the agent draws, kept in one place so they can be swapped.

    Attributes:
        spinner_frames: Braille spinner frames redrawn in place while busy.
        activity_icons: Animated stars shown next to "Thinking…" style status.
        tool_marker: Prefix of tool invocation and response lines.
        result_marker: Connector prefixing tool results.
        decorative_icons: Bullets that carry no status meaning of their own.
        prompt: The standalone input prompt shown when the agent is ready.
        agent_names: Words that only appear when the agent itself is running.
    """

    spinner_frames: str = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
    activity_icons: str = "✻✳✶✽✢"
    tool_marker: str = "⏺"
    result_marker: str = "⎿"
    decorative_icons: str = "◇◆●○"
    prompt: str = "❯"
    agent_names: tuple[str, ...] = field(
        default=("Claude", "claude-code", "Anthropic", "Vibing")
    )

    @property
    def status_icons(self) -> str:
        """Glyphs that mark agent status lines (stars, tool and result markers)."""
        return self.activity_icons + self.tool_marker + self.result_marker

    @property
    def leading_icons(self) -> str:
        """Glyphs stripped from the front of a line before it is shown."""
        return self.status_icons + self.decorative_icons
