"""Terminal output parsing pipeline: ansi → detectors → status_classifier / message_extractor."""

from agent_status.parsing.models import (  # noqa: F401
    AgentStatus,
    GlyphSet,
    ParseResult,
    ParserState,
    WaitingKind,
)

__all__ = ["AgentStatus", "GlyphSet", "ParseResult", "ParserState", "WaitingKind"]
