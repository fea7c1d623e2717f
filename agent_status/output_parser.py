from __future__ import annotations

import logging

from agent_status.config import ParserConfig, validate_parser_config
from agent_status.log_setup import TRACE
from agent_status.parsing.ansi import strip_control_sequences
from agent_status.parsing.detectors import AgentPresenceDetector
from agent_status.parsing.message_extractor import find_action_message, find_content_message
from agent_status.parsing.models import (
    AgentStatus,
    GlyphSet,
    ParseResult,
    ParserState,
    WaitingKind,
)
from agent_status.parsing.status_classifier import classify_status
from agent_status.parsing.ui_patterns import DEFAULT_PATTERNS, build_patterns

logger = logging.getLogger(__name__)


class AgentOutputParser:
    """Infers an agent's status and activity line from its raw PTY output.

    One instance per terminal session: created when the session's terminal
    opens, ``reset()`` when it restarts, dropped when it closes. Each call runs
    to completion without I/O, so sessions can be parsed on separate threads
    as long as no instance is shared.

    Every incoming chunk is appended to a rolling buffer; the whole buffer is
    stripped (sequences can straddle chunks), the presence latch is updated,
    and the tail window is classified and mined for a message. ``None`` in a
    result always means "unchanged", never a state of its own.
    """

    def __init__(
        self,
        config: ParserConfig | None = None,
        glyphs: GlyphSet | None = None,
    ) -> None:
        """Initialize an empty parser.

        Args:
            config: Buffer cap, window size and message limit. Defaults
                to :class:`ParserConfig` defaults.
            glyphs: Glyph set the agent renders. Defaults to the built-in set.

        Raises:
            ConfigError: If ``config`` holds inconsistent sizes.
        """
        self._config = config or ParserConfig()
        validate_parser_config(self._config)
        self._patterns = build_patterns(glyphs) if glyphs is not None else DEFAULT_PATTERNS
        self._state = ParserState()
        self._presence = AgentPresenceDetector(self._state, self._patterns)

    @property
    def state(self) -> ParserState:
        """The session's parser memory (read it, don't mutate it)."""
        return self._state

    @property
    def config(self) -> ParserConfig:
        return self._config

    def process_data(self, chunk: str) -> ParseResult:
        """Process one chunk of terminal output.

        Args:
            chunk: Text exactly as the terminal backend delivered it; may be
                cut mid-line or mid-escape-sequence.

        Returns:
            The status and message detected for this call, ``None`` fields
            meaning no change from the last known value.
        """
        state = self._state
        cap = self._config.buffer_cap
        state.buffer += chunk
        if len(state.buffer) > cap:
            state.buffer = state.buffer[-cap:]

        clean = strip_control_sequences(state.buffer)
        detected = self._presence.check(clean)
        window = clean[-self._config.window_size:]

        classification = classify_status(
            window,
            state.last_status,
            agent_detected=detected,
            patterns=self._patterns,
        )

        max_length = self._config.max_message_length
        action = find_action_message(window, self._patterns, max_length)
        if action is not None:
            state.last_action_message = action
            message = action
        else:
            # Nothing new worth showing: keep the last action visible through
            # redraws instead of blanking the line
            message = (
                find_content_message(window, self._patterns, max_length)
                or state.last_action_message
            )

        status = classification.status
        if status is not None and status != state.last_status:
            logger.debug(
                "Status %s -> %s (%s)",
                state.last_status.value, status.value, classification.waiting_kind.value,
            )
        if status is not None:
            state.last_status = status
        if message is not None:
            state.last_message = message

        logger.log(
            TRACE, "process_data chunk=%d buffer=%d status=%s message=%r",
            len(chunk), len(state.buffer), status.value if status else None, message,
        )
        return ParseResult(
            status=status,
            message=message,
            waiting_kind=classification.waiting_kind,
        )

    def check_idle(self) -> ParseResult | None:
        """Report idle after a quiet period, when that is safe to do.

        The caller owns the timer and calls this once no chunk has arrived for
        the idle timeout. Silence alone never ends a WORKING status; only an
        explicit idle prompt in the output does. A WAITING status goes idle
        like any other unless ``keep_waiting_on_idle`` is configured.

        Returns:
            An idle result carrying the last message, or None when the agent
            has not been detected or the last status must be kept.
        """
        state = self._state
        if not state.agent_detected:
            return None
        if state.last_status == AgentStatus.WORKING or (
            state.last_status == AgentStatus.WAITING and self._config.keep_waiting_on_idle
        ):
            logger.log(TRACE, "check_idle: keeping %s", state.last_status.value)
            return None

        state.last_status = AgentStatus.IDLE
        return ParseResult(
            status=AgentStatus.IDLE,
            message=state.last_message,
            waiting_kind=WaitingKind.NONE,
        )

    def reset(self) -> None:
        """Forget everything; the next chunk is treated like a fresh session."""
        self._state = ParserState()
        self._presence = AgentPresenceDetector(self._state, self._patterns)
        logger.debug("Parser reset")

    def has_detected_agent(self) -> bool:
        return self._state.agent_detected

    def get_buffer(self) -> str:
        """Return the raw rolling buffer (debugging only)."""
        return self._state.buffer
