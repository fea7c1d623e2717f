from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from agent_status.log_setup import TRACE
from agent_status.parsing.detectors import (
    detect_idle_prompt,
    detect_menu_context,
    detect_question,
    detect_tool_approval,
    detect_working,
    pending_tail,
)
from agent_status.parsing.models import AgentStatus, WaitingKind
from agent_status.parsing.ui_patterns import DEFAULT_PATTERNS, UIPatterns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    """Status decided for one window. ``status`` None means "no change"."""

    status: AgentStatus | None = None
    waiting_kind: WaitingKind = WaitingKind.NONE


@dataclass
class RuleContext:
    """Window views shared by every rule of one classification pass."""

    window: str
    lines: list[str]
    tail: list[str] = field(default_factory=list)
    menu_active: bool = False
    question: bool = False


@dataclass(frozen=True)
class StatusRule:
    """One step of the cascade: when ``applies`` holds, the result is fixed."""

    name: str
    applies: Callable[[RuleContext, UIPatterns], bool]
    status: AgentStatus
    waiting_kind: WaitingKind = WaitingKind.NONE


# Most specific first; the first rule that applies wins.
STATUS_RULES: tuple[StatusRule, ...] = (
    StatusRule(
        name="tool_approval",
        applies=lambda ctx, p: ctx.menu_active or detect_tool_approval(ctx.tail, p),
        status=AgentStatus.WAITING,
        waiting_kind=WaitingKind.TOOL_APPROVAL,
    ),
    StatusRule(
        name="question",
        applies=lambda ctx, p: ctx.question,
        status=AgentStatus.WAITING,
        waiting_kind=WaitingKind.QUESTION,
    ),
    StatusRule(
        name="idle_prompt",
        applies=lambda ctx, p: (
            not ctx.menu_active and not ctx.question and detect_idle_prompt(ctx.lines, p)
        ),
        status=AgentStatus.IDLE,
    ),
    StatusRule(
        name="working",
        applies=lambda ctx, p: detect_working(ctx.window, p),
        status=AgentStatus.WORKING,
    ),
)

_NO_CHANGE = Classification()


def classify_status(
    window: str,
    last_status: AgentStatus | None = None,
    *,
    agent_detected: bool = True,
    patterns: UIPatterns = DEFAULT_PATTERNS,
    rules: tuple[StatusRule, ...] = STATUS_RULES,
) -> Classification:
    """Classify the agent's status from the tail of the cleaned buffer.

    Runs the ordered rule cascade:
      1. Menu/confirmation guard (computed up front, feeds rules 2 and 4)
      2. Tool approval waiting
      3. Open-ended question waiting
      4. Idle prompt, unless a menu or question is showing
      5. Working indicators
      6. Nothing matched: no change

    Waiting states are checked first because a missed approval prompt looks
    like a hang, and the idle prompt glyph is also the menu cursor.

    Args:
        window: Stripped text, normally the last few hundred characters.
        last_status: The previously reported status, reserved for future
            hysteresis logic. Currently unused.
        agent_detected: Whether the presence latch is set. Before that no
            status is ever reported.
        patterns: Rule tables to match against.
        rules: The cascade to evaluate, in priority order.

    Returns:
        A Classification; ``status`` is None when nothing conclusive matched.
    """
    if not agent_detected or not window.strip():
        return _NO_CHANGE

    lines = window.split("\n")
    tail = pending_tail(lines, patterns)
    ctx = RuleContext(
        window=window,
        lines=lines,
        tail=tail,
        menu_active=detect_menu_context(tail, patterns),
        question=detect_question(tail, patterns),
    )

    for rule in rules:
        if rule.applies(ctx, patterns):
            logger.log(
                TRACE, "classify_status -> %s (rule=%s, kind=%s)",
                rule.status.value, rule.name, rule.waiting_kind.value,
            )
            return Classification(status=rule.status, waiting_kind=rule.waiting_kind)

    logger.log(TRACE, "classify_status -> no change (tail=%d lines)", len(tail))
    return _NO_CHANGE
