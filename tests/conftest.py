import pytest
import yaml

from agent_status.config import ParserConfig
from agent_status.output_parser import AgentOutputParser


@pytest.fixture
def parser():
    """A fresh parser with default limits."""
    return AgentOutputParser()


@pytest.fixture
def small_parser():
    """A parser with a tiny buffer, for exercising the cap."""
    return AgentOutputParser(ParserConfig(buffer_cap=200, window_size=100))


@pytest.fixture
def detected_parser(parser):
    """A parser that has already latched onto agent output."""
    parser.process_data("\x1b[1mClaude Code\x1b[22m v2.0\r\n")
    assert parser.has_detected_agent()
    return parser


@pytest.fixture
def write_config(tmp_path):
    """Write a YAML config file and return its path."""
    def _write(data) -> str:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump(data))
        return str(config_file)
    return _write
