"""Caller-side status tracking: merged per-session view plus the idle timer.

:class:`AgentOutputParser` never schedules anything; whoever feeds it owns the
quiet-period timer. This module is that owner for asyncio callers:

- :class:`SessionStatus`: the merged view a UI shows for one session.
- :class:`SessionStatusTracker`: feeds a parser, merges results, and re-arms
  a ``call_later`` idle timer on every chunk.
- :class:`StatusRegistry`: one tracker per session id, nothing shared.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Callable

from agent_status.config import ParserConfig
from agent_status.log_setup import TRACE
from agent_status.output_parser import AgentOutputParser
from agent_status.parsing.models import AgentStatus, GlyphSet, ParseResult, WaitingKind

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Raised when a registry operation names an unknown or duplicate session."""

    pass


@dataclass
class SessionStatus:
    """Last known status, message and waiting kind of one session."""

    status: AgentStatus = AgentStatus.IDLE
    message: str | None = None
    waiting_kind: WaitingKind = WaitingKind.NONE

    def merge(self, result: ParseResult) -> bool:
        """Fold a parse result in; ``None`` fields keep the current value.

        The waiting kind follows the status: it is only replaced when the
        result carries a status.

        Returns:
            True if any field changed.
        """
        before = (self.status, self.message, self.waiting_kind)
        if result.status is not None:
            self.status = result.status
            self.waiting_kind = (
                result.waiting_kind if result.status == AgentStatus.WAITING else WaitingKind.NONE
            )
        if result.message is not None:
            self.message = result.message
        return (self.status, self.message, self.waiting_kind) != before


OnChange = Callable[[str, SessionStatus], None]


class SessionStatusTracker:
    """Drives one parser from a chunk stream and owns its idle timer.

    ``feed`` must be called from a running event loop, normally the one that
    receives PTY output. ``on_change`` gets a snapshot of the merged status
    each time it actually changes, so repeated identical results don't reach
    the UI.
    """

    def __init__(
        self,
        session_id: str,
        parser: AgentOutputParser,
        on_change: OnChange | None = None,
        idle_timeout: float | None = None,
    ) -> None:
        """Initialize a tracker for one session.

        Args:
            session_id: Identifier passed back to ``on_change``.
            parser: The session's own parser; never shared.
            on_change: Called with ``(session_id, snapshot)`` on changes.
            idle_timeout: Quiet period in seconds before ``check_idle()``
                runs. Defaults to the parser config's ``idle_timeout_ms``.
        """
        self.session_id = session_id
        self.parser = parser
        self.status = SessionStatus()
        self._on_change = on_change
        self._idle_timeout = (
            idle_timeout if idle_timeout is not None else parser.config.idle_timeout
        )
        self._idle_handle: asyncio.TimerHandle | None = None

    @property
    def idle_pending(self) -> bool:
        """Whether an idle check is currently scheduled."""
        return self._idle_handle is not None

    def feed(self, chunk: str) -> ParseResult:
        """Parse a chunk, publish any change, and restart the idle timer."""
        self._cancel_idle_timer()
        result = self.parser.process_data(chunk)
        self._publish(result)
        loop = asyncio.get_running_loop()
        self._idle_handle = loop.call_later(self._idle_timeout, self._on_idle_timeout)
        return result

    def restart(self) -> None:
        """Start over after the session's terminal was restarted."""
        self._cancel_idle_timer()
        self.parser.reset()
        fresh = SessionStatus()
        if fresh != self.status:
            self.status = fresh
            self._notify()

    def close(self) -> None:
        """Stop the timer and drop parser memory; the tracker is done."""
        self._cancel_idle_timer()
        self.parser.reset()

    def _on_idle_timeout(self) -> None:
        self._idle_handle = None
        result = self.parser.check_idle()
        logger.log(TRACE, "idle timeout session=%s result=%s", self.session_id, result)
        if result is not None:
            self._publish(result)

    def _publish(self, result: ParseResult) -> None:
        if self.status.merge(result):
            logger.debug(
                "Session %s: %s (%s) %r",
                self.session_id, self.status.status.value,
                self.status.waiting_kind.value, self.status.message,
            )
            self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.session_id, replace(self.status))

    def _cancel_idle_timer(self) -> None:
        if self._idle_handle is not None:
            self._idle_handle.cancel()
            self._idle_handle = None


class StatusRegistry:
    """One :class:`SessionStatusTracker` per terminal session."""

    def __init__(
        self,
        config: ParserConfig | None = None,
        glyphs: GlyphSet | None = None,
        on_change: OnChange | None = None,
    ) -> None:
        self._config = config or ParserConfig()
        self._glyphs = glyphs
        self._on_change = on_change
        self._trackers: dict[str, SessionStatusTracker] = {}

    def open(self, session_id: str) -> SessionStatusTracker:
        """Create the tracker (and a fresh parser) for a newly opened terminal.

        Raises:
            SessionError: If the session is already open.
        """
        if session_id in self._trackers:
            raise SessionError(f"Session already open: {session_id}")
        parser = AgentOutputParser(self._config, self._glyphs)
        tracker = SessionStatusTracker(session_id, parser, on_change=self._on_change)
        self._trackers[session_id] = tracker
        logger.debug("Opened status tracking for session %s", session_id)
        return tracker

    def get(self, session_id: str) -> SessionStatusTracker:
        """Return the tracker of an open session.

        Raises:
            SessionError: If the session is not open.
        """
        try:
            return self._trackers[session_id]
        except KeyError:
            raise SessionError(f"Unknown session: {session_id}") from None

    def feed(self, session_id: str, chunk: str) -> ParseResult:
        return self.get(session_id).feed(chunk)

    def restart(self, session_id: str) -> None:
        self.get(session_id).restart()

    def close(self, session_id: str) -> None:
        """Stop tracking a closed session. Closing an unknown id is a no-op."""
        tracker = self._trackers.pop(session_id, None)
        if tracker is not None:
            tracker.close()
            logger.debug("Closed status tracking for session %s", session_id)

    def sessions(self) -> list[str]:
        return list(self._trackers)

    def close_all(self) -> None:
        for session_id in list(self._trackers):
            self.close(session_id)
