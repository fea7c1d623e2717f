"""Agent status inference from raw pseudo-terminal output."""

from agent_status.output_parser import AgentOutputParser  # noqa: F401
from agent_status.parsing.models import AgentStatus, ParseResult, WaitingKind  # noqa: F401

__all__ = ["AgentOutputParser", "AgentStatus", "ParseResult", "WaitingKind"]
