import logging

import pytest

from agent_status import AgentOutputParser, AgentStatus, ParseResult, WaitingKind
from agent_status.config import ConfigError, ParserConfig
from agent_status.parsing.message_extractor import is_garbage_message
from agent_status.parsing.models import GlyphSet
from tests.parsing.conftest import (
    APPROVAL_TURN_ANSI,
    BASH_RUNNING_ANSI,
    IDLE_ANSI,
    QUESTION_ANSI,
    SHELL_ANSI,
    THINKING_ANSI,
    TOOL_ANSI,
)


def _feed_in_chunks(parser: AgentOutputParser, text: str, size: int) -> ParseResult:
    result = ParseResult()
    for start in range(0, len(text), size):
        result = parser.process_data(text[start : start + size])
    return result


class TestScenarios:
    def test_detects_agent_and_working(self, parser):
        result = parser.process_data("\x1b[2J\x1b[HAgentName\n✻ Thinking…\n")
        assert parser.has_detected_agent()
        assert result.status == AgentStatus.WORKING
        assert result.waiting_kind == WaitingKind.NONE

    def test_tool_result_reports_invocation(self, parser):
        parser.process_data("\x1b[2J\x1b[HAgentName\n✻ Thinking…\n")
        result = parser.process_data("⏺ Read(file.ts)\n⎿ Read 120 lines\n")
        assert "Read(file.ts)" in result.message
        assert result.status != AgentStatus.IDLE

    def test_approval_menu_waits(self, detected_parser):
        result = detected_parser.process_data(
            "Working on it\nDo you want to proceed?\n❯ 1. Yes\n  2. No"
        )
        assert result.status == AgentStatus.WAITING
        assert result.waiting_kind == WaitingKind.TOOL_APPROVAL
        assert result.message == "Do you want to proceed?"

    def test_standalone_prompt_is_idle(self, detected_parser):
        result = detected_parser.process_data("Finished the refactor.\n\n❯\n")
        assert result.status == AgentStatus.IDLE
        assert result.waiting_kind == WaitingKind.NONE
        assert result.message == "Finished the refactor."

    def test_reset_forgets_everything(self, parser):
        parser.process_data(THINKING_ANSI + TOOL_ANSI)
        assert parser.state.last_message == "Read(src/app.ts)"
        parser.reset()
        assert not parser.has_detected_agent()
        assert parser.get_buffer() == ""
        assert parser.state.last_message is None
        assert parser.state.last_action_message is None
        assert parser.state.last_status == AgentStatus.IDLE

    def test_reset_then_shell_output_reports_nothing(self, parser):
        parser.process_data(THINKING_ANSI)
        parser.reset()
        assert parser.process_data(SHELL_ANSI).status is None


class TestFullTurn:
    def test_working_then_approval_then_running(self, parser):
        assert parser.process_data(THINKING_ANSI).status == AgentStatus.WORKING
        assert parser.process_data(TOOL_ANSI).message == "Read(src/app.ts)"

        result = parser.process_data(
            APPROVAL_TURN_ANSI[len(THINKING_ANSI) + len(TOOL_ANSI):]
        )
        assert result.status == AgentStatus.WAITING
        assert result.waiting_kind == WaitingKind.TOOL_APPROVAL
        assert result.message == "Bash(npm test)"

        result = parser.process_data(BASH_RUNNING_ANSI)
        assert result.status == AgentStatus.WORKING
        assert result.waiting_kind == WaitingKind.NONE

    def test_question(self, parser):
        parser.process_data(THINKING_ANSI)
        result = parser.process_data(QUESTION_ANSI)
        assert result.status == AgentStatus.WAITING
        assert result.waiting_kind == WaitingKind.QUESTION

    def test_back_to_idle(self, parser):
        parser.process_data(THINKING_ANSI + TOOL_ANSI)
        result = parser.process_data(IDLE_ANSI)
        assert result.status == AgentStatus.IDLE
        assert result.message == "Read(src/app.ts)"

    def test_status_change_logged(self, parser, caplog):
        with caplog.at_level(logging.DEBUG, logger="agent_status"):
            parser.process_data(THINKING_ANSI)
        assert "Agent detected" in caplog.text
        assert "Status idle -> working" in caplog.text


class TestChunkBoundaries:
    @pytest.mark.parametrize("size", [1, 3, 7, 64])
    @pytest.mark.parametrize("transcript", [
        APPROVAL_TURN_ANSI,
        THINKING_ANSI + TOOL_ANSI + IDLE_ANSI,
        THINKING_ANSI + QUESTION_ANSI,
    ])
    def test_split_matches_whole(self, transcript, size):
        whole = AgentOutputParser()
        whole_result = whole.process_data(transcript)

        split = AgentOutputParser()
        split_result = _feed_in_chunks(split, transcript, size)

        assert split_result.status == whole_result.status
        assert split_result.waiting_kind == whole_result.waiting_kind
        assert split.state.last_status == whole.state.last_status
        assert split.state.last_message == whole.state.last_message
        assert split.get_buffer() == whole.get_buffer()


class TestBufferBounds:
    def test_buffer_never_exceeds_cap(self, small_parser):
        fed = ""
        for i in range(50):
            chunk = f"line {i} " + "x" * 30 + "\n"
            fed += chunk
            small_parser.process_data(chunk)
            assert len(small_parser.get_buffer()) <= 200
        assert small_parser.get_buffer() == fed[-200:]

    def test_oversized_chunk_trimmed(self, small_parser):
        small_parser.process_data("y" * 1000)
        assert small_parser.get_buffer() == "y" * 200

    def test_latch_survives_trim(self, small_parser):
        small_parser.process_data(THINKING_ANSI)
        for _ in range(20):
            small_parser.process_data(SHELL_ANSI)
        assert "✻" not in small_parser.get_buffer()
        assert small_parser.has_detected_agent()


class TestBeforeDetection:
    def test_shell_output_has_no_status(self, parser):
        result = parser.process_data(SHELL_ANSI)
        assert result.status is None
        assert result.waiting_kind == WaitingKind.NONE
        assert not parser.has_detected_agent()

    def test_shell_prompt_glyph_not_idle(self, parser):
        """A bare prompt-like glyph in a shell must not read as agent idle."""
        assert parser.process_data("$ echo\n❯\n").status is None

    def test_check_idle_before_detection(self, parser):
        parser.process_data(SHELL_ANSI)
        assert parser.check_idle() is None


class TestMessages:
    def test_remembered_action_resurfaces(self, parser):
        parser.process_data(TOOL_ANSI)
        result = parser.process_data("⠋\n" * 300)
        assert result.status == AgentStatus.WORKING
        assert result.message == "Read(src/app.ts)"
        assert parser.state.last_action_message == "Read(src/app.ts)"

    def test_custom_message_length(self):
        parser = AgentOutputParser(ParserConfig(max_message_length=10))
        assert parser.process_data(TOOL_ANSI).message == "Read(sr..."

    def test_never_garbage(self, parser):
        chunks = [
            "⠋", "\x1b[?20", "26h", "\x1b[38;5;", "246m", "25l", "\r\n", "?2026",
            "[?25l", "h\n", "⠙", "✻\x1b[1C", "Thinking…", "\r\n", "2026h\n", "uts\n",
        ]
        for chunk in chunks:
            message = parser.process_data(chunk).message
            if message is not None:
                assert message
                assert not is_garbage_message(message)
        if parser.state.last_message is not None:
            assert not is_garbage_message(parser.state.last_message)

    @pytest.mark.parametrize("chunk", [
        "", "\x1b", "\x1b[" * 100, "\x00\x01\x02", "❯", "\r\r\r", "�" * 10, "⏺(",
    ])
    def test_never_raises(self, parser, chunk):
        parser.process_data(THINKING_ANSI)
        assert isinstance(parser.process_data(chunk), ParseResult)

    def test_huge_cursor_forward_does_not_raise(self, parser):
        parser.process_data("Claude\n")
        result = parser.process_data("\x1b[99999999999C")
        assert isinstance(result, ParseResult)
        assert len(parser.get_buffer()) <= parser.config.buffer_cap

    def test_cursor_forward_keeps_status_in_window(self, parser):
        result = parser.process_data("Claude\n✻ Thinking…\n\x1b[600C")
        assert result.status == AgentStatus.WORKING


class TestCheckIdle:
    def test_idle_after_quiet_output(self, detected_parser):
        result = detected_parser.check_idle()
        assert result == ParseResult(
            status=AgentStatus.IDLE,
            message="Claude Code v2.0",
            waiting_kind=WaitingKind.NONE,
        )

    def test_working_is_kept(self, parser):
        parser.process_data(THINKING_ANSI)
        assert parser.check_idle() is None
        assert parser.state.last_status == AgentStatus.WORKING

    def test_waiting_goes_idle_by_default(self, parser):
        parser.process_data(APPROVAL_TURN_ANSI)
        result = parser.check_idle()
        assert result.status == AgentStatus.IDLE
        assert result.waiting_kind == WaitingKind.NONE
        assert result.message == "Bash(npm test)"
        assert parser.state.last_status == AgentStatus.IDLE

    def test_waiting_kept_when_configured(self):
        parser = AgentOutputParser(ParserConfig(keep_waiting_on_idle=True))
        parser.process_data(APPROVAL_TURN_ANSI)
        assert parser.check_idle() is None
        assert parser.state.last_status == AgentStatus.WAITING


class TestConfiguration:
    def test_window_larger_than_buffer_rejected(self):
        with pytest.raises(ConfigError, match="window_size"):
            AgentOutputParser(ParserConfig(buffer_cap=100, window_size=500))

    def test_non_positive_size_rejected(self):
        with pytest.raises(ConfigError, match="positive"):
            AgentOutputParser(ParserConfig(buffer_cap=0))

    def test_message_limit_too_small(self):
        with pytest.raises(ConfigError, match="at least 4"):
            AgentOutputParser(ParserConfig(max_message_length=3))

    def test_custom_glyphs(self):
        parser = AgentOutputParser(glyphs=GlyphSet(agent_names=("Gemini",)))
        parser.process_data("Gemini CLI ready\n")
        assert parser.has_detected_agent()

    def test_sessions_do_not_share_state(self):
        first, second = AgentOutputParser(), AgentOutputParser()
        first.process_data(THINKING_ANSI)
        assert first.has_detected_agent()
        assert not second.has_detected_agent()
        assert second.get_buffer() == ""
